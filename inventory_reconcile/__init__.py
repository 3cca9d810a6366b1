"""Core package for 全日 / 同興 inventory reconciliation."""

from .errors import DecodeFailure, EngineUnavailable, HeaderNotFound, MissingInput, ReconcileError
from .models import ColumnIndex, HeaderSearch, ReconciliationRow, ReconcileResult, ReportMode
from .pipeline import ReconcileOptions, SourceSpec, reconcile, reconcile_files, reconcile_sheets

__all__ = [
    "ColumnIndex",
    "DecodeFailure",
    "EngineUnavailable",
    "HeaderNotFound",
    "HeaderSearch",
    "MissingInput",
    "ReconcileError",
    "ReconcileOptions",
    "ReconcileResult",
    "ReconciliationRow",
    "ReportMode",
    "SourceSpec",
    "reconcile",
    "reconcile_files",
    "reconcile_sheets",
]
