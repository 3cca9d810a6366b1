from __future__ import annotations

from typing import Iterable, List

from .models import ReconciliationRow


def rank_rows(rows: Iterable[ReconciliationRow]) -> List[ReconciliationRow]:
    """Stable sort: mismatches first, then by item key."""
    return sorted(rows, key=lambda row: (row.is_match, row.id))
