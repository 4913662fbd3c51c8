from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Dict, Iterable, Set, Tuple

from watchfiles import Change, watch

from .store import TenantConfigStore

log = logging.getLogger(__name__)


def _normalize_path(path: Path) -> str:
    """Resolve *path* and normalise its case for cross-platform comparison."""
    try:
        return os.path.normcase(str(path.resolve()))
    except (OSError, ValueError) as e:
        log.warning("Failed to normalize path %s: %s", path, e)
        return os.path.normcase(str(path))


def watch_and_reload(
    store: TenantConfigStore,
    tenant_ids: Iterable[str] | None = None,
    *,
    debounce: int = 500,
) -> Tuple[threading.Thread, threading.Event]:
    """Reload tenant documents when their files change on disk.

    Starts a **daemon** thread watching the files behind *tenant_ids* (every
    tenant currently known to *store* when omitted). A modified or added file
    is reloaded through :meth:`TenantConfigStore.load`, so the usual repair
    and schema reconciliation apply. Only path-based gateways are watched.

    Returns
    -------
    (thread, stop_event)
        The watcher thread and an event that stops it when set.
    """
    stop_event = threading.Event()
    ids = list(tenant_ids) if tenant_ids is not None else store.tenant_ids()

    file_map: Dict[str, str] = {}
    watch_directories: Set[Path] = set()
    for tenant_id in ids:
        try:
            location = store.location_for(tenant_id)
        except ValueError as e:
            log.warning("Not watching tenant '%s': %s", tenant_id, e)
            continue
        if not isinstance(location, Path):
            log.debug("Location of tenant '%s' is not a file; not watched", tenant_id)
            continue
        file_map[_normalize_path(location)] = tenant_id
        # watchfiles needs existing directories
        location.parent.mkdir(parents=True, exist_ok=True)
        watch_directories.add(location.parent)

    reload_events = {Change.added, Change.modified}

    def _watcher_loop() -> None:
        if not watch_directories:
            log.debug("No tenant files to watch, exiting watcher loop")
            return
        log.debug(
            "Watching %d directories for %d tenant files",
            len(watch_directories),
            len(file_map),
        )
        try:
            for change_batch in watch(*watch_directories, debounce=debounce, stop_event=stop_event):
                if stop_event.is_set():
                    break
                affected: Set[str] = set()
                for change_type, changed in change_batch:
                    if change_type not in reload_events:
                        continue
                    tenant_id = file_map.get(_normalize_path(Path(changed)))
                    if tenant_id is not None:
                        affected.add(tenant_id)
                for tenant_id in affected:
                    log.debug("Reloading config of '%s' after file change", tenant_id)
                    store.load(tenant_id)
        except Exception as e:
            log.error("Config watcher loop failed: %s", e, exc_info=True)
        finally:
            log.debug("Config watcher loop exiting")

    thread = threading.Thread(target=_watcher_loop, daemon=True, name="TenantConfigWatcher")
    thread.start()
    log.debug("Started file watcher thread: %s", thread.name)
    return thread, stop_event


__all__ = ["watch_and_reload"]
