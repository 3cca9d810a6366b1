from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from .aggregate import aggregate_quantities
from .compare import compare_totals
from .errors import MissingInput
from .header import locate_header
from .io_utils import PandasSheetLoader, SheetLoader, load_sources
from .models import AggregatedMap, HeaderSearch, RawSheet, ReconcileResult, ReconcileSummary, ReportMode
from .ranking import rank_rows
from .schema import (
    DEFAULT_HEADER_SPAN,
    DEFAULT_SEARCH_WINDOW,
    SOURCE_A_KEY_COLUMN,
    SOURCE_A_LABEL,
    SOURCE_A_NAME,
    SOURCE_A_QTY_COLUMN,
    SOURCE_B_KEY_COLUMN,
    SOURCE_B_LABEL,
    SOURCE_B_NAME,
    SOURCE_B_QTY_COLUMN,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceSpec:
    name: str
    label: str
    key_column: str
    qty_column: str
    header_search: HeaderSearch = HeaderSearch.WINDOWED
    search_window: int = DEFAULT_SEARCH_WINDOW
    header_span: int = DEFAULT_HEADER_SPAN
    data_start_row: Optional[int] = None


# 全日表標題固定在第 1 列；同興表前面有報表抬頭，需要往下搜尋。
SOURCE_A = SourceSpec(
    name=SOURCE_A_NAME,
    label=SOURCE_A_LABEL,
    key_column=SOURCE_A_KEY_COLUMN,
    qty_column=SOURCE_A_QTY_COLUMN,
    header_search=HeaderSearch.STRICT,
    search_window=1,
)
SOURCE_B = SourceSpec(
    name=SOURCE_B_NAME,
    label=SOURCE_B_LABEL,
    key_column=SOURCE_B_KEY_COLUMN,
    qty_column=SOURCE_B_QTY_COLUMN,
)


@dataclass
class ReconcileOptions:
    source_a: SourceSpec = SOURCE_A
    source_b: SourceSpec = SOURCE_B
    report_mode: ReportMode = ReportMode.ALL
    loader: Optional[SheetLoader] = field(default=None, repr=False)

    def with_source_b(self, **changes) -> "ReconcileOptions":
        return replace(self, source_b=replace(self.source_b, **changes))

    def resolved_loader(self) -> SheetLoader:
        if self.loader is None:
            self.loader = PandasSheetLoader()
        return self.loader


def aggregate_source(sheet: RawSheet, spec: SourceSpec) -> AggregatedMap:
    index = locate_header(
        sheet,
        spec.key_column,
        spec.qty_column,
        source=spec.label,
        search=spec.header_search,
        window=spec.search_window,
        span=spec.header_span,
        data_start_row=spec.data_start_row,
    )
    return aggregate_quantities(sheet, index, source=spec.label)


def reconcile_sheets(sheet_a: RawSheet, sheet_b: RawSheet, options: Optional[ReconcileOptions] = None) -> ReconcileResult:
    """Run header search, aggregation, comparison and ranking over two decoded grids."""
    options = options or ReconcileOptions()
    totals_a = aggregate_source(sheet_a, options.source_a)
    totals_b = aggregate_source(sheet_b, options.source_b)

    rows = rank_rows(compare_totals(totals_a, totals_b, options.report_mode))
    # 不一致的品項在兩種模式下都會保留，總品項數則以聯集計算。
    summary = ReconcileSummary(
        total_keys=len(set(totals_a) | set(totals_b)),
        mismatch_count=sum(1 for row in rows if not row.is_match),
    )
    logger.info(
        "reconciled total_keys=%d mismatches=%d rows=%d mode=%s",
        summary.total_keys,
        summary.mismatch_count,
        len(rows),
        options.report_mode,
    )
    return ReconcileResult(rows=tuple(rows), summary=summary, totals_a=totals_a, totals_b=totals_b)


def reconcile(
    payload_a: Optional[bytes],
    payload_b: Optional[bytes],
    options: Optional[ReconcileOptions] = None,
    *,
    filename_a: Optional[str] = None,
    filename_b: Optional[str] = None,
) -> ReconcileResult:
    """Reconcile two uploaded files; any failure aborts the run without a partial result."""
    options = options or ReconcileOptions()
    missing = [
        spec.label for spec, payload in ((options.source_a, payload_a), (options.source_b, payload_b)) if not payload
    ]
    if missing:
        raise MissingInput(missing)

    sheet_a, sheet_b = load_sources(
        options.resolved_loader(),
        payload_a,
        payload_b,
        filename_a=filename_a,
        filename_b=filename_b,
        source_a=options.source_a.label,
        source_b=options.source_b.label,
    )
    return reconcile_sheets(sheet_a, sheet_b, options)


def reconcile_files(path_a: Optional[Path], path_b: Optional[Path], options: Optional[ReconcileOptions] = None) -> ReconcileResult:
    for path in (path_a, path_b):
        if path is not None and not path.exists():
            raise FileNotFoundError(f"inventory file not found: {path}")
    payload_a = path_a.read_bytes() if path_a else None
    payload_b = path_b.read_bytes() if path_b else None
    return reconcile(
        payload_a,
        payload_b,
        options,
        filename_a=path_a.name if path_a else None,
        filename_b=path_b.name if path_b else None,
    )
