from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .codec import detect_format

__all__ = ["StoreSettings"]


class StoreSettings(BaseSettings):
    """Where and how tenant documents are stored.

    Every field can be overridden with a ``TENANT_CONFIG_`` environment
    variable, e.g. ``TENANT_CONFIG_CONFIG_DIR=/srv/app/config``.
    """

    config_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "tenant_config_manager",
        description="Root folder; tenant files live in one sub-folder per tenant.",
    )
    file_name: str = Field(
        default="config_v2.json",
        description="File name used for the shared default and every tenant.",
    )
    file_format: Optional[Literal["json", "yaml", "toml"]] = Field(
        default=None,
        description=(
            "On-disk format. Inferred from file_name when unset. "
            "TOML has no null, so groups with None values cannot be saved as toml."
        ),
    )
    default_tenant_key: str = Field(
        default="default",
        description="Key under which an empty tenant id is kept in memory.",
    )

    model_config = SettingsConfigDict(env_prefix="TENANT_CONFIG_", extra="ignore")

    @property
    def resolved_format(self) -> str:
        return self.file_format or detect_format(self.file_name)
