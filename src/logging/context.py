# src/logging/context.py — v2
"""Run and stage context attached to every log record."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Set once per inference run, then per pipeline stage.
_codebase_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "codebase_id", default=None
)
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)
_step: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "step", default=None
)


@dataclass
class LogContext:
    """Current logging context."""

    codebase_id: str | None = None
    run_id: str | None = None
    stage: str | None = None
    step: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Non-None fields only."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    return LogContext(
        codebase_id=_codebase_id.get(),
        run_id=_run_id.get(),
        stage=_stage.get(),
        step=_step.get(),
    )


def set_run_context(codebase_id: str, run_id: str) -> None:
    _codebase_id.set(codebase_id)
    _run_id.set(run_id)


def set_stage_context(stage: str, step: str | None = None) -> None:
    _stage.set(stage)
    _step.set(step)


def clear_context() -> None:
    _codebase_id.set(None)
    _run_id.set(None)
    _stage.set(None)
    _step.set(None)
