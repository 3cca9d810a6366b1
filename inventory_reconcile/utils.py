from __future__ import annotations

import math
import re
from typing import Tuple

from .models import Cell, Empty, Number, Text

# 取開頭的數字部分，與 parseFloat 相同；千分位逗號只接受三位一組。
_NUMERIC_PREFIX = re.compile(r"[+-]?(?:(?:[0-9]{1,3}(?:,[0-9]{3}(?![0-9]))+|[0-9]+)(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def to_trimmed_string(cell: Cell) -> str:
    """Stringify and strip a cell, 示例：Number(1001.0) -> "1001"，Text(" A1 ") -> "A1"."""
    if isinstance(cell, Empty):
        return ""
    if isinstance(cell, Number):
        value = cell.value
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return cell.value.strip()


def parse_quantity(cell: Cell) -> Tuple[float, bool]:
    """Parse a quantity cell into ``(value, defaulted)``.

    ``defaulted`` is True when a non-blank cell had no usable number and fell
    back to 0.0, 示例：Text("12箱") -> (12.0, False)，Text("N/A") -> (0.0, True)。
    """
    if isinstance(cell, Number):
        value = cell.value
    elif isinstance(cell, Text):
        text = cell.value.strip()
        if not text:
            return 0.0, False
        match = _NUMERIC_PREFIX.match(text)
        if match is None:
            return 0.0, True
        value = float(match.group().replace(",", ""))
    else:
        return 0.0, False
    if not math.isfinite(value):
        return 0.0, True
    return value, False


def to_float_or_zero(cell: Cell) -> float:
    """Parse a quantity cell, 無法解析時回傳 0.0，示例：Text("N/A") -> 0.0，Text("15 PCS") -> 15.0."""
    return parse_quantity(cell)[0]
