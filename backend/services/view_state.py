"""
Report screen state as an explicit value with a single update function.

Every period change starts a new load generation. A load result carries the
generation it was started for and is applied only while that generation is
still current, so a slow response for an old period can never overwrite the
data for the period now selected.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional, Union

LOAD_ERROR_NOTICE = "Impossible de charger les données"


@dataclass(frozen=True)
class ReportView:
    period: str = ""
    generation: int = 0
    data: Any = None
    notice: Optional[str] = None
    loading: bool = False


@dataclass(frozen=True)
class LoadStarted:
    period: str


@dataclass(frozen=True)
class LoadSucceeded:
    generation: int
    data: Any


@dataclass(frozen=True)
class LoadFailed:
    generation: int
    error: str = ""


ViewEvent = Union[LoadStarted, LoadSucceeded, LoadFailed]


def apply(view: ReportView, event: ViewEvent) -> ReportView:
    """Return the next state; stale results leave the view unchanged."""
    if isinstance(event, LoadStarted):
        return replace(view, period=event.period, generation=view.generation + 1, loading=True, notice=None)
    if event.generation != view.generation:
        return view
    if isinstance(event, LoadSucceeded):
        return replace(view, data=event.data, loading=False, notice=None)
    if isinstance(event, LoadFailed):
        # Previous data stays on screen.
        return replace(view, loading=False, notice=LOAD_ERROR_NOTICE)
    raise TypeError(f"Unknown view event: {event!r}")
