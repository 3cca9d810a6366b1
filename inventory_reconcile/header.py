from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .errors import HeaderNotFound
from .models import ColumnIndex, HeaderSearch, RawSheet, Row
from .schema import DEFAULT_HEADER_SPAN, DEFAULT_SEARCH_WINDOW
from .utils import to_trimmed_string

logger = logging.getLogger(__name__)


def _find_label(row: Row, label: str) -> Optional[int]:
    for column, cell in enumerate(row):
        if to_trimmed_string(cell) == label:
            return column
    return None


def _match_single_row(sheet: RawSheet, labels: Sequence[str], limit: int) -> Optional[tuple[int, List[int]]]:
    for row_index in range(limit):
        columns: List[int] = []
        for label in labels:
            column = _find_label(sheet[row_index], label)
            if column is None:
                break
            columns.append(column)
        else:
            return row_index, columns
    return None


def _match_across_rows(
    sheet: RawSheet, labels: Sequence[str], limit: int, span: int
) -> Optional[tuple[int, List[int]]]:
    """Accumulate labels over ``span`` consecutive rows; returns the last row a label was found on."""
    for start in range(limit):
        found: Dict[str, int] = {}
        last_found_row = start
        for row_index in range(start, min(start + span, limit)):
            for label in labels:
                if label in found:
                    continue
                column = _find_label(sheet[row_index], label)
                if column is not None:
                    found[label] = column
                    last_found_row = row_index
            if len(found) == len(labels):
                return last_found_row, [found[label] for label in labels]
    return None


def _missing_labels(sheet: RawSheet, labels: Sequence[str], limit: int) -> List[str]:
    missing = []
    for label in labels:
        if not any(_find_label(sheet[row_index], label) is not None for row_index in range(limit)):
            missing.append(label)
    # 每個標題都出現過但不在同一個搜尋範圍內時，回報全部標題。
    return missing or list(labels)


def locate_header(
    sheet: RawSheet,
    key_label: str,
    qty_label: str,
    *,
    source: str = "",
    search: HeaderSearch = HeaderSearch.WINDOWED,
    window: int = DEFAULT_SEARCH_WINDOW,
    span: int = DEFAULT_HEADER_SPAN,
    data_start_row: Optional[int] = None,
) -> ColumnIndex:
    """Find the key and quantity columns within the first ``window`` rows.

    ``strict`` only accepts a single row holding both labels. ``windowed`` falls
    back to labels split over up to ``span`` consecutive rows, e.g. 第 7 列只有
    「貨品代號」、第 8 列只有「副單位數量」時資料從第 9 列開始。
    """
    labels = [key_label.strip(), qty_label.strip()]
    limit = min(len(sheet), max(window, 0))

    match = _match_single_row(sheet, labels, limit)
    if match is None and search == HeaderSearch.WINDOWED:
        match = _match_across_rows(sheet, labels, limit, max(span, 1))
    if match is None:
        raise HeaderNotFound(source, _missing_labels(sheet, labels, limit))

    header_row, (key_column, qty_column) = match
    index = ColumnIndex(
        header_row_index=header_row,
        key_column_index=key_column,
        qty_column_index=qty_column,
        data_start_row=data_start_row,
    )
    logger.info(
        "header located source=%s row=%d key_col=%d qty_col=%d data_start=%d",
        source,
        index.header_row_index,
        index.key_column_index,
        index.qty_column_index,
        index.first_data_row,
    )
    return index
