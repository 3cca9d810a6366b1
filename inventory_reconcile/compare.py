from __future__ import annotations

from typing import List, Mapping

from .models import ReconciliationRow, ReportMode


def compare_totals(
    totals_a: Mapping[str, float],
    totals_b: Mapping[str, float],
    report_mode: ReportMode = ReportMode.ALL,
) -> List[ReconciliationRow]:
    """Build one comparison row per key in the union of both sources.

    Keys missing from one side compare against 0.0. Rows come out in key order;
    ``mismatches_only`` drops rows within the match tolerance.
    """
    rows: List[ReconciliationRow] = []
    for key in sorted(set(totals_a.keys()) | set(totals_b.keys())):
        row = ReconciliationRow.compare(key, totals_a.get(key, 0.0), totals_b.get(key, 0.0))
        if report_mode == ReportMode.MISMATCHES_ONLY and row.is_match:
            continue
        rows.append(row)
    return rows
