"""Background run management."""

from .registry import RunHandle, RunProgress, RunRegistry, RunStatus

__all__ = [
    "RunHandle",
    "RunProgress",
    "RunRegistry",
    "RunStatus",
]
