from __future__ import annotations

import threading
from typing import Callable, Dict, Optional, Protocol

__all__ = [
    "TenantDirectory",
    "TaskUpdateHook",
    "StaticTenantDirectory",
    "CallbackHook",
]


class TenantDirectory(Protocol):
    """Knows which tenant is active and how tenants are shown to people."""

    def current_tenant_id(self) -> Optional[str]: ...

    def display_name(self, tenant_id: str) -> Optional[str]: ...


class TaskUpdateHook(Protocol):
    def notify_config_changed(self) -> None: ...


class StaticTenantDirectory:
    """In-process directory: the host sets the active tenant explicitly."""

    def __init__(self, current: Optional[str] = None, names: Optional[Dict[str, str]] = None):
        self._lock = threading.Lock()
        self._current = current
        self._names: Dict[str, str] = dict(names or {})

    def current_tenant_id(self) -> Optional[str]:
        with self._lock:
            return self._current

    def set_current(self, tenant_id: Optional[str]) -> None:
        with self._lock:
            self._current = tenant_id

    def display_name(self, tenant_id: str) -> Optional[str]:
        with self._lock:
            return self._names.get(tenant_id)

    def set_display_name(self, tenant_id: str, name: str) -> None:
        with self._lock:
            self._names[tenant_id] = name


class CallbackHook:
    """Adapts a plain callable to :class:`TaskUpdateHook`."""

    def __init__(self, callback: Callable[[], None]):
        self._callback = callback

    def notify_config_changed(self) -> None:
        self._callback()
