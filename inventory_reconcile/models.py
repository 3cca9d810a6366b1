from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Tuple, Union

from .schema import (
    MATCH_EPSILON,
    STATUS_MATCH,
    STATUS_MISMATCH,
    STATUS_MISSING_A,
    STATUS_MISSING_B,
)


class HeaderSearch(StrEnum):
    STRICT = "strict"
    WINDOWED = "windowed"


class ReportMode(StrEnum):
    ALL = "all"
    MISMATCHES_ONLY = "mismatches_only"


@dataclass(frozen=True)
class Empty:
    """Blank cell."""


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Number:
    value: float


Cell = Union[Empty, Text, Number]
Row = Tuple[Cell, ...]
RawSheet = Tuple[Row, ...]

EMPTY = Empty()


@dataclass(frozen=True)
class ColumnIndex:
    """Header position for one source, 示例：ColumnIndex(7, 0, 4) 表示資料從第 8 列開始。"""

    header_row_index: int
    key_column_index: int
    qty_column_index: int
    data_start_row: Optional[int] = None  # 指定固定資料起始列時覆寫 header_row_index + 1

    @property
    def first_data_row(self) -> int:
        if self.data_start_row is not None:
            return self.data_start_row
        return self.header_row_index + 1


@dataclass(frozen=True)
class AggregationStats:
    rows_scanned: int = 0
    rows_skipped: int = 0
    quantities_defaulted: int = 0


@dataclass(frozen=True)
class AggregatedMap(Mapping[str, float]):
    """Read-only totals per item key for one source."""

    totals: Mapping[str, float]
    stats: AggregationStats = field(default_factory=AggregationStats)

    def __post_init__(self) -> None:
        object.__setattr__(self, "totals", MappingProxyType(dict(self.totals)))

    def __getitem__(self, key: str) -> float:
        return self.totals[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.totals)

    def __len__(self) -> int:
        return len(self.totals)

    def to_dict(self) -> dict[str, float]:
        return dict(self.totals)


@dataclass(frozen=True)
class ReconciliationRow:
    id: str
    quantity_a: float
    quantity_b: float
    difference: float
    is_match: bool

    @classmethod
    def compare(cls, key: str, quantity_a: float, quantity_b: float) -> "ReconciliationRow":
        difference = quantity_a - quantity_b
        return cls(
            id=key,
            quantity_a=quantity_a,
            quantity_b=quantity_b,
            difference=difference,
            is_match=abs(difference) < MATCH_EPSILON,
        )

    @property
    def status(self) -> str:
        # 數量為 0 視為該來源缺漏。
        if self.is_match:
            return STATUS_MATCH
        if self.quantity_a == 0:
            return STATUS_MISSING_A
        if self.quantity_b == 0:
            return STATUS_MISSING_B
        return STATUS_MISMATCH


@dataclass(frozen=True)
class ReconcileSummary:
    total_keys: int
    mismatch_count: int


@dataclass(frozen=True)
class ReconcileResult:
    rows: Tuple[ReconciliationRow, ...]
    summary: ReconcileSummary
    totals_a: Optional[AggregatedMap] = None
    totals_b: Optional[AggregatedMap] = None
