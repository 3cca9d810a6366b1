from __future__ import annotations

import importlib
import logging
import numbers
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from io import BytesIO
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol, Set, Tuple

import numpy as np
import pandas as pd

from .errors import DecodeFailure, EngineUnavailable, ReconcileError
from .models import EMPTY, Cell, Number, RawSheet, ReconcileResult, Text
from .schema import REPORT_COLUMNS

logger = logging.getLogger(__name__)

# 副檔名 -> pandas Excel 引擎
EXCEL_ENGINES: dict[str, str] = {
    ".xlsx": "openpyxl",
    ".xlsm": "openpyxl",
    ".xls": "xlrd",
}


class SheetLoader(Protocol):
    def load(self, payload: bytes, *, filename: Optional[str] = None) -> RawSheet:
        """Decode file bytes into the first sheet as a row-major grid."""
        ...


def cell_from_value(value: Any) -> Cell:
    """Tag a raw spreadsheet value, 示例：nan -> Empty，12 -> Number(12.0)，"A1" -> Text("A1")."""
    if value is None or (pd.api.types.is_scalar(value) and pd.isna(value)):
        return EMPTY
    if isinstance(value, (bool, np.bool_)):
        return Text(str(bool(value)).upper())
    if isinstance(value, numbers.Number):
        return Number(float(value))
    if isinstance(value, (datetime, date)):
        return Text(value.isoformat())
    text = str(value)
    if not text:
        return EMPTY
    return Text(text)


def frame_to_sheet(frame: pd.DataFrame) -> RawSheet:
    """Convert a header-less DataFrame to an immutable grid, trailing blanks kept as Empty."""
    return tuple(tuple(cell_from_value(value) for value in row) for row in frame.itertuples(index=False, name=None))


def engine_for(filename: Optional[str]) -> Optional[str]:
    """Return the pandas Excel engine a file needs, None for CSV."""
    suffix = Path(filename).suffix.lower() if filename else ".xlsx"
    if suffix == ".csv":
        return None
    return EXCEL_ENGINES.get(suffix, "openpyxl")


class PandasSheetLoader:
    """SheetLoader backed by pandas; Excel engines are checked when the loader is built."""

    def __init__(self, engines: Iterable[str] = ("openpyxl",)) -> None:
        self.engines: Set[str] = set()
        for engine in engines:
            # 啟動時即確認解析元件可用，避免執行到一半才失敗。
            self._require(engine)

    @classmethod
    def for_filenames(cls, filenames: Iterable[Optional[str]]) -> "PandasSheetLoader":
        engines = {engine_for(filename) for filename in filenames}
        return cls(sorted(engine for engine in engines if engine))

    def _require(self, engine: str) -> None:
        if engine in self.engines:
            return
        try:
            importlib.import_module(engine)
        except ImportError as exc:
            logger.error("excel engine unavailable engine=%s error=%s", engine, exc)
            raise EngineUnavailable(engine) from exc
        self.engines.add(engine)

    def load(self, payload: bytes, *, filename: Optional[str] = None) -> RawSheet:
        engine = engine_for(filename)
        buffer = BytesIO(payload)
        if engine is None:
            frame = pd.read_csv(buffer, header=None, dtype=object, keep_default_na=False, encoding="utf-8-sig")
        else:
            self._require(engine)
            frame = pd.read_excel(buffer, sheet_name=0, header=None, engine=engine)
        return frame_to_sheet(frame)


def load_sources(
    loader: SheetLoader,
    payload_a: bytes,
    payload_b: bytes,
    *,
    filename_a: Optional[str] = None,
    filename_b: Optional[str] = None,
    source_a: str = "",
    source_b: str = "",
) -> Tuple[RawSheet, RawSheet]:
    """Decode both payloads concurrently and wait for both before returning."""
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="sheet-loader") as pool:
        future_a = pool.submit(loader.load, payload_a, filename=filename_a)
        future_b = pool.submit(loader.load, payload_b, filename=filename_b)
        sheet_a = _resolve(future_a, source_a)
        sheet_b = _resolve(future_b, source_b)
    logger.info("loaded sheets rows_a=%d rows_b=%d", len(sheet_a), len(sheet_b))
    return sheet_a, sheet_b


def _resolve(future, source: str) -> RawSheet:
    try:
        return future.result()
    except ReconcileError:
        raise
    except Exception as exc:
        logger.warning("decode failed source=%s error=%s", source, exc)
        raise DecodeFailure(source) from exc


def write_report(path: Path, result: ReconcileResult) -> None:
    """Write ranked rows to CSV (utf-8-sig) or Excel depending on the suffix."""
    rows = [
        {
            REPORT_COLUMNS[0]: row.id,
            REPORT_COLUMNS[1]: row.quantity_a,
            REPORT_COLUMNS[2]: row.quantity_b,
            REPORT_COLUMNS[3]: row.difference,
            REPORT_COLUMNS[4]: row.status,
        }
        for row in result.rows
    ]
    df = pd.DataFrame(rows, columns=REPORT_COLUMNS)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() in {".xlsx", ".xlsm"}:
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="差異清單", index=False)
    else:
        df.to_csv(path, index=False, encoding="utf-8-sig")
