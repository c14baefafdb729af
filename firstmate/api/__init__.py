"""API routers."""

from firstmate.api import schedule

__all__ = [
    "schedule",
]
