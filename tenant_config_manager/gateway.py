# =============================================================
#  tenant_config_manager/gateway.py
# =============================================================
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Protocol

__all__ = ["PersistenceGateway", "FileGateway"]

log = logging.getLogger(__name__)


class PersistenceGateway(Protocol):
    """Reads and writes named text blobs for a tenant or the shared default."""

    def default_location(self) -> Any: ...

    def location_for(self, tenant_id: str) -> Any: ...

    def exists(self, location: Any) -> bool: ...

    def read(self, location: Any) -> str: ...

    def write(self, location: Any, text: str) -> bool: ...


class FileGateway:
    """
    File system gateway.

    * shared default → ``<base_dir>/<file_name>``
    * tenant         → ``<base_dir>/<tenant_id>/<file_name>``
    """

    def __init__(self, base_dir: str | os.PathLike, file_name: str = "config_v2.json"):
        self.base_dir = Path(base_dir).expanduser().resolve()
        self.file_name = file_name

    def default_location(self) -> Path:
        return self.base_dir / self.file_name

    def location_for(self, tenant_id: str) -> Path:
        if not tenant_id:
            return self.default_location()
        if Path(tenant_id).name != tenant_id or tenant_id in (".", ".."):
            raise ValueError(f"Tenant id '{tenant_id}' is not a valid directory name.")
        return self.base_dir / tenant_id / self.file_name

    def exists(self, location: Path) -> bool:
        return Path(location).is_file()

    def read(self, location: Path) -> str:
        return Path(location).read_text(encoding="utf-8")

    def write(self, location: Path, text: str) -> bool:
        path = Path(location)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
            return True
        except OSError as exc:
            log.warning("Could not write %s: %s", path, exc, exc_info=True)
            return False

    def __repr__(self) -> str:
        return f"FileGateway({str(self.base_dir)!r}, file_name={self.file_name!r})"
