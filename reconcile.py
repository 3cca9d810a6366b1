from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from inventory_reconcile.errors import ReconcileError
from inventory_reconcile.io_utils import PandasSheetLoader, write_report
from inventory_reconcile.models import HeaderSearch, ReportMode
from inventory_reconcile.pipeline import ReconcileOptions, reconcile_files
from inventory_reconcile.schema import DEFAULT_HEADER_SPAN, DEFAULT_SEARCH_WINDOW


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="比對「全日」與「同興」庫存表，列出數量不符的品項。")
    parser.add_argument(
        "--source-a",
        type=Path,
        required=True,
        help="全日庫存表（標題在第 1 列：貨號 / 庫存數量）。",
    )
    parser.add_argument(
        "--source-b",
        type=Path,
        required=True,
        help="同興庫存表（自動偵測標題：貨品代號 / 副單位數量）。",
    )
    parser.add_argument(
        "--header-search",
        choices=[mode.value for mode in HeaderSearch],
        default=HeaderSearch.WINDOWED.value,
        help="同興表標題搜尋方式：strict 只接受單一列，windowed 允許標題分散在相鄰列（預設: windowed）。",
    )
    parser.add_argument(
        "--search-window",
        type=int,
        default=DEFAULT_SEARCH_WINDOW,
        help=f"同興表標題搜尋的列數上限（預設: {DEFAULT_SEARCH_WINDOW}）。",
    )
    parser.add_argument(
        "--header-span",
        type=int,
        default=DEFAULT_HEADER_SPAN,
        help=f"windowed 模式下標題最多跨越的相鄰列數（預設: {DEFAULT_HEADER_SPAN}）。",
    )
    parser.add_argument(
        "--data-start-row",
        type=int,
        help="固定同興表資料起始列（從 0 起算），未指定時使用最後一個標題列的下一列。",
    )
    parser.add_argument(
        "--report-mode",
        choices=[mode.value for mode in ReportMode],
        default=ReportMode.ALL.value,
        help="all 列出全部品項，mismatches_only 只列出不一致品項（預設: all）。",
    )
    parser.add_argument(
        "--report-path",
        type=Path,
        help="將比對結果寫入 CSV 或 Excel（依副檔名）。",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="日誌等級（預設: WARNING）。",
    )
    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> ReconcileOptions:
    options = ReconcileOptions(report_mode=ReportMode(args.report_mode))
    return options.with_source_b(
        header_search=HeaderSearch(args.header_search),
        search_window=args.search_window,
        header_span=args.header_span,
        data_start_row=args.data_start_row,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    options = build_options(args)
    try:
        options.loader = PandasSheetLoader.for_filenames([args.source_a.name, args.source_b.name])
        result = reconcile_files(args.source_a, args.source_b, options)
    except (ReconcileError, OSError) as exc:
        print(f"比對失敗: {exc}", file=sys.stderr)
        return 1

    print("=== 比對完成 ===")
    print(f"總品項 {result.summary.total_keys} 項，異常品項 {result.summary.mismatch_count} 項。")
    for row in result.rows:
        print(f"{row.id} | {row.quantity_a:g} | {row.quantity_b:g} | {row.difference:g} | {row.status}")
    if not result.summary.mismatch_count:
        print("完美一致！沒有發現任何庫存差異。")
    if args.report_path:
        write_report(args.report_path, result)
        print(f"報告: {args.report_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
