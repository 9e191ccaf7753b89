from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict

from core.settings.sections import SchedulerSettings, ServerSettings


class AppSettings(BaseModel):
    """
    Application settings aggregator.

    Sections are loaded when ``get_app_settings`` is first called,
    never at import time.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    scheduler: SchedulerSettings
    server: ServerSettings


@lru_cache()
def get_app_settings() -> AppSettings:
    """Return cached global settings for the entire app."""
    return AppSettings(
        scheduler=SchedulerSettings(),
        server=ServerSettings(),
    )
