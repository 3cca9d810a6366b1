"""Failures that abort a reconciliation run."""

from __future__ import annotations

from typing import Sequence

from .schema import MSG_DECODE_FAILURE, MSG_ENGINE_UNAVAILABLE, MSG_MISSING_INPUT


class ReconcileError(Exception):
    """Base class; ``str(error)`` is the message shown to the user."""


class MissingInput(ReconcileError):
    def __init__(self, missing: Sequence[str] = ()) -> None:
        self.missing = tuple(missing)
        message = MSG_MISSING_INPUT
        if self.missing:
            message = f"{message}（缺少: {'、'.join(self.missing)}）"
        super().__init__(message)


class HeaderNotFound(ReconcileError):
    def __init__(self, source: str, missing: Sequence[str]) -> None:
        self.source = source
        self.missing = tuple(missing)
        labels = "、".join(f"「{label}」" for label in self.missing)
        prefix = f"{source}表的" if source else ""
        super().__init__(f"找不到{prefix}標題列{labels}")


class DecodeFailure(ReconcileError):
    def __init__(self, source: str | None = None) -> None:
        self.source = source
        message = MSG_DECODE_FAILURE
        if source:
            message = f"{source}表{message}"
        super().__init__(message)


class EngineUnavailable(ReconcileError):
    def __init__(self, engine: str) -> None:
        self.engine = engine
        super().__init__(f"{MSG_ENGINE_UNAVAILABLE}（{engine}）")
