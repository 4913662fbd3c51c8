from __future__ import annotations

from typing import Any, Optional

__all__ = ["TenantConfigError", "DecodeFailure", "PersistenceFailure"]


class TenantConfigError(Exception):
    """Base class for errors raised inside the tenant config store."""


class DecodeFailure(TenantConfigError):
    """A persisted blob could not be decoded, even after one repair attempt."""

    def __init__(self, tenant_id: str, location: Any, result: Any):
        self.tenant_id = tenant_id
        self.location = location
        self.result = result
        super().__init__(f"Could not decode config for '{tenant_id}' at {location}: {result}")


class PersistenceFailure(TenantConfigError):
    """The persistence gateway refused a write."""

    def __init__(self, location: Any, reason: Optional[str] = None):
        self.location = location
        self.reason = reason
        msg = f"Could not write config to {location}"
        super().__init__(f"{msg}: {reason}" if reason else msg)
