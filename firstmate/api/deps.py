"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that build services from
environment configuration.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from firstmate.core.config import get_settings
from firstmate.services.scheduler_service import SchedulerService


# ===========================================
# Service Dependencies
# ===========================================


@lru_cache()
def get_scheduler_service() -> SchedulerService:
    """Get SchedulerService configured from settings."""
    return SchedulerService.from_settings(get_settings())


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

Scheduler = Annotated[SchedulerService, Depends(get_scheduler_service)]
