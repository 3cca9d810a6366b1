from __future__ import annotations

import logging
import math
from collections import defaultdict
from typing import Dict, List

from .models import EMPTY, AggregatedMap, AggregationStats, Cell, ColumnIndex, RawSheet, Row
from .schema import UNDEFINED_KEY
from .utils import parse_quantity, to_trimmed_string

logger = logging.getLogger(__name__)


def _cell_at(row: Row, column: int) -> Cell:
    if column < len(row):
        return row[column]
    return EMPTY


def aggregate_quantities(sheet: RawSheet, index: ColumnIndex, *, source: str = "") -> AggregatedMap:
    """Group rows below the header by item key and sum their quantities.

    Rows with an empty key or the literal "undefined" are skipped. Totals use
    ``math.fsum`` so the result does not depend on row order.
    """
    quantities: Dict[str, List[float]] = defaultdict(list)
    scanned = skipped = defaulted = 0

    for row_number in range(index.first_data_row, len(sheet)):
        row = sheet[row_number]
        scanned += 1
        key = to_trimmed_string(_cell_at(row, index.key_column_index))
        if not key or key == UNDEFINED_KEY:
            skipped += 1
            logger.debug("skip row source=%s row=%d key=%r", source, row_number, key)
            continue
        quantity, was_defaulted = parse_quantity(_cell_at(row, index.qty_column_index))
        if was_defaulted:
            defaulted += 1
        quantities[key].append(quantity)

    stats = AggregationStats(rows_scanned=scanned, rows_skipped=skipped, quantities_defaulted=defaulted)
    logger.info(
        "aggregated source=%s keys=%d scanned=%d skipped=%d defaulted=%d",
        source,
        len(quantities),
        scanned,
        skipped,
        defaulted,
    )
    return AggregatedMap(totals={key: math.fsum(values) for key, values in quantities.items()}, stats=stats)
