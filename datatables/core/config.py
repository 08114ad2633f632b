# datatables/core/config.py
"""Settings shared by every column definition (sortability, date formats, view lookup)."""

import os
from functools import lru_cache
from typing import Annotated, Any, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class DatatableSettings(BaseSettings):
    """
    Injected configuration consumed by column constructors and formatters.

    Values come from ``DATATABLES_*`` environment variables or a ``.env``
    file, e.g. ``DATATABLES_DEFAULT_SORTABLE=false``.
    """

    default_sortable: bool = True
    default_datetime_format: str = "%d/%m/%Y %H:%M"
    default_date_format: str = "%d/%m/%Y"
    default_time_format: str = "%H:%M"
    base_url: str = ""
    # os.pathsep separated in the environment
    template_dirs: Annotated[List[str], NoDecode] = []

    model_config = SettingsConfigDict(
        env_prefix="DATATABLES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="forbid",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("template_dirs", mode="before")
    @classmethod
    def split_template_dirs(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [d.strip() for d in v.split(os.pathsep) if d.strip()]
        return v


@lru_cache()
def get_settings() -> DatatableSettings:
    """Get datatable settings with caching"""
    return DatatableSettings()
