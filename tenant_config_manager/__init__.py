# =============================================================
#  tenant_config_manager/__init__.py
# =============================================================
"""
Tenant-Config-Manager
=====================

Per-tenant, file-backed settings documents that survive schema changes.

Main ideas
~~~~~~~~~~
* Setting groups are declared as **pydantic** models and collected in a
  :class:`ModelRegistry`; the registry is the single source of truth for which
  groups and fields exist and what they default to.
* A :class:`TenantConfigStore` keeps one :class:`ConfigurationDocument` per
  tenant, created on first use and kept for the life of the process.
* ``load`` repairs unknown members, drops retired fields, keeps user values for
  fields that still exist and rewrites the file in canonical form. It never
  raises; broken files are reset to defaults.
* ``save`` only writes when the canonical text differs from what is on disk.

Quick example
~~~~~~~~~~~~~
```python
from tenant_config_manager import (
    ModelRegistry, SettingGroup, Field, StoreSettings, TenantConfigStore,
)

class ForestSettings(SettingGroup):
    enabled: bool = Field(True, description="Collect energy")
    interval: int = 30

store = TenantConfigStore.from_settings(
    ModelRegistry({"forest": ForestSettings}),
    StoreSettings(config_dir="~/my_app/config"),
)

doc = store.load("2088001")
doc.set_value("forest.interval", 45)
store.save("2088001")          # written
store.save("2088001")          # unchanged → skipped
```
"""

from __future__ import annotations

from importlib import metadata as _meta
import logging as _logging

# --------------------------------------------------------------------- #
# Version
# --------------------------------------------------------------------- #
try:  # When installed (pip/poetry)
    __version__: str = _meta.version("tenant-config-manager")
except _meta.PackageNotFoundError:  # Editable checkout / source tree
    __version__ = "0.1.0"

# --------------------------------------------------------------------- #
# Logging
# --------------------------------------------------------------------- #
_logging.getLogger(__name__).addHandler(_logging.NullHandler())  # *never* touch the root logger.

# --------------------------------------------------------------------- #
# Public re-exports
# --------------------------------------------------------------------- #
from pydantic import BaseModel, Field, ValidationError  # noqa: E402

from .codec import DecodeResult, DecodeStatus, DocumentCodec  # noqa: E402
from .directory import CallbackHook, StaticTenantDirectory, TaskUpdateHook, TenantDirectory  # noqa: E402
from .document import ConfigurationDocument  # noqa: E402
from .errors import DecodeFailure, PersistenceFailure, TenantConfigError  # noqa: E402
from .fields import FieldSet, FieldValue  # noqa: E402
from .gateway import FileGateway, PersistenceGateway  # noqa: E402
from .registry import FieldDefinition, FieldRegistry, GroupDescriptor, ModelRegistry, SettingGroup  # noqa: E402
from .settings import StoreSettings  # noqa: E402
from .store import TenantConfigStore  # noqa: E402
from .watchers import watch_and_reload  # noqa: E402

__all__ = [
    "TenantConfigStore",
    "ConfigurationDocument",
    "FieldSet",
    "FieldValue",
    "FieldDefinition",
    "GroupDescriptor",
    "FieldRegistry",
    "ModelRegistry",
    "SettingGroup",
    "DocumentCodec",
    "DecodeResult",
    "DecodeStatus",
    "PersistenceGateway",
    "FileGateway",
    "TenantDirectory",
    "StaticTenantDirectory",
    "TaskUpdateHook",
    "CallbackHook",
    "StoreSettings",
    "TenantConfigError",
    "DecodeFailure",
    "PersistenceFailure",
    "watch_and_reload",
    "BaseModel",
    "Field",
    "ValidationError",
]
