# =============================================================
#  tenant_config_manager/store.py
# =============================================================
from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Dict, Iterator, List, Mapping, Optional

from .codec import DecodeStatus, DocumentCodec
from .directory import TaskUpdateHook, TenantDirectory
from .document import ConfigurationDocument
from .errors import DecodeFailure, PersistenceFailure, TenantConfigError
from .fields import FieldSet
from .gateway import FileGateway, PersistenceGateway
from .registry import FieldRegistry
from .settings import StoreSettings

__all__ = ["TenantConfigStore"]

log = logging.getLogger(__name__)


class TenantConfigStore:
    """
    Tenant id → :class:`ConfigurationDocument`, plus load / save / unload.

    * Documents are created on first access and never removed; ``unload``
      resets field values in place.
    * An empty tenant id and ``default_tenant_key`` both address the shared
      default document, stored at the gateway's default location.
    * ``load``, ``save`` and ``unload`` each run under one process-wide lock
      per operation kind.
    """

    def __init__(
        self,
        registry: FieldRegistry,
        gateway: PersistenceGateway,
        *,
        directory: TenantDirectory | None = None,
        task_hook: TaskUpdateHook | None = None,
        codec: DocumentCodec | None = None,
        default_tenant_key: str = "default",
    ):
        self._registry = registry
        self._gateway = gateway
        self._directory = directory
        self._task_hook = task_hook
        self._codec = codec or DocumentCodec()
        self._default_key = default_tenant_key

        self._documents: Dict[str, ConfigurationDocument] = {}
        self._map_lock = threading.Lock()
        self._load_lock = threading.RLock()
        self._save_lock = threading.RLock()
        self._unload_lock = threading.RLock()

    @classmethod
    def from_settings(
        cls,
        registry: FieldRegistry,
        settings: StoreSettings | None = None,
        *,
        directory: TenantDirectory | None = None,
        task_hook: TaskUpdateHook | None = None,
    ) -> "TenantConfigStore":
        settings = settings or StoreSettings()
        return cls(
            registry,
            FileGateway(settings.config_dir, settings.file_name),
            directory=directory,
            task_hook=task_hook,
            codec=DocumentCodec(settings.resolved_format),
            default_tenant_key=settings.default_tenant_key,
        )

    # ------------ lookup --------------------------------------------- #

    @property
    def gateway(self) -> PersistenceGateway:
        return self._gateway

    @property
    def codec(self) -> DocumentCodec:
        return self._codec

    def get_or_create(self, tenant_id: Optional[str]) -> ConfigurationDocument:
        key = self._key(tenant_id)
        with self._map_lock:
            document = self._documents.get(key)
            if document is None:
                document = self._documents[key] = ConfigurationDocument()
                log.debug("Created empty config document for '%s'", key)
            return document

    def get_active(self) -> ConfigurationDocument:
        return self.get_or_create(self._current_tenant_id())

    def location_for(self, tenant_id: Optional[str]) -> Any:
        if self._is_shared(tenant_id):
            return self._gateway.default_location()
        return self._gateway.location_for(tenant_id)

    # ------------ schema reconciliation ------------------------------ #

    def reconcile_field_schema(
        self,
        document: ConfigurationDocument,
        incoming: Mapping[str, FieldSet] | None,
    ) -> None:
        """Rebuild *document*'s groups from the registry.

        Values from *incoming* are carried over by field code when non-None;
        fields the registry no longer lists are dropped.
        """
        incoming = dict(incoming or {})
        groups: Dict[str, FieldSet] = {}
        for descriptor in self._registry.list_groups():
            fields = descriptor.build_field_set()
            old_fields = incoming.get(descriptor.code)
            if old_fields:
                for field in fields.values():
                    old = old_fields.get(field.code)
                    try:
                        if old is not None and old.value is not None:
                            field.set_object_value(copy.deepcopy(old.value))
                    except Exception as exc:
                        log.warning(
                            "Could not carry over value of '%s.%s'; keeping default. (%s)",
                            descriptor.code,
                            field.code,
                            exc,
                            exc_info=True,
                        )
            groups[descriptor.code] = fields
        document.replace_groups(groups)

    # ------------ change detection / save ---------------------------- #

    def is_modified(self, tenant_id: Optional[str] = None) -> bool:
        try:
            location = self.location_for(tenant_id)
            if not self._gateway.exists(location):
                return True
            persisted = self._gateway.read(location)
        except (OSError, ValueError) as exc:
            log.warning("Could not read config for '%s': %s", self._key(tenant_id), exc)
            return True
        formatted = self._codec.encode(self.get_or_create(tenant_id))
        return formatted is None or formatted != persisted

    def save(self, tenant_id: Optional[str] = None, force: bool = False) -> bool:
        with self._save_lock:
            if not force and not self.is_modified(tenant_id):
                return True
            key = self._key(tenant_id)
            text = self._codec.encode(self.get_or_create(tenant_id))
            if text is None:
                log.error("Saving config for '%s' failed: document could not be formatted", key)
                return False
            try:
                location = self.location_for(tenant_id)
                if not self._gateway.write(location, text):
                    raise PersistenceFailure(location)
            except (OSError, ValueError, PersistenceFailure) as exc:
                log.error("Saving config for '%s' failed: %s", key, exc, exc_info=True)
                return False
            log.info("Saved config of [%s]", self._label(tenant_id))
            return True

    def save_all(self, force: bool = False) -> bool:
        results = [self.save(tenant_id, force) for tenant_id in self.tenant_ids()]
        return all(results)

    # ------------ load ----------------------------------------------- #

    def load(self, tenant_id: Optional[str] = None) -> ConfigurationDocument:
        """Load, repair and reconcile the document of *tenant_id*.

        Never raises: on any failure the document is reset to registry
        defaults and that state is persisted if possible.
        """
        with self._load_lock:
            key = self._key(tenant_id)
            document = self.get_or_create(tenant_id)
            location = None
            log.info("Loading config for '%s'", key)
            try:
                location = self.location_for(tenant_id)
                default_location = self._gateway.default_location()

                if self._is_shared(tenant_id) and not self._gateway.exists(location):
                    log.info("No default config at %s; writing registry defaults", location)
                    self._reset_to_defaults(document)
                    self._write(location, self._encode_or_raise(document))

                if self._gateway.exists(location):
                    text = self._gateway.read(location)
                    self._decode_with_repair(key, location, text, document)
                    self.reconcile_field_schema(document, document.setting_groups)
                    formatted = self._codec.encode(document)
                    if formatted is not None and formatted != text:
                        log.info("Rewriting %s in canonical form", location)
                        self._write(location, formatted)
                elif self._gateway.exists(default_location):
                    text = self._gateway.read(default_location)
                    self._decode_with_repair(key, default_location, text, document)
                    self.reconcile_field_schema(document, document.setting_groups)
                    log.info("Seeding config of [%s] from %s", self._label(tenant_id), default_location)
                    self._write(location, self._encode_or_raise(document))
                else:
                    self._reset_to_defaults(document)
                    self._write(location, self._encode_or_raise(document))
            except Exception as exc:
                log.error(
                    "Loading config for '%s' failed; resetting to defaults. (%s)",
                    key,
                    exc,
                    exc_info=True,
                )
                try:
                    self._reset_to_defaults(document)
                    if location is not None:
                        self._write(location, self._encode_or_raise(document))
                except Exception as inner:
                    log.error("Resetting config for '%s' failed: %s", key, inner, exc_info=True)

            document.initialized = True
            self._notify_if_active(tenant_id)
            return document

    def is_loaded(self, tenant_id: Optional[str] = None) -> bool:
        """Without *tenant_id* the active tenant is checked; ``""`` is the default slot."""
        if tenant_id is None:
            tenant_id = self._current_tenant_id()
        return self.get_or_create(tenant_id).initialized

    def is_active_loaded(self) -> bool:
        return self.is_loaded()

    # ------------ unload --------------------------------------------- #

    def unload(self, tenant_id: Optional[str] = None) -> None:
        # ``initialized`` stays as it is; see DESIGN.md
        with self._unload_lock:
            self.get_or_create(tenant_id).reset_fields()

    def unload_active(self) -> None:
        with self._unload_lock:
            self.get_active().reset_fields()

    # ------------ book-keeping --------------------------------------- #

    def tenant_ids(self) -> List[str]:
        with self._map_lock:
            return list(self._documents)

    def __getitem__(self, tenant_id: Optional[str]) -> ConfigurationDocument:
        return self._documents[self._key(tenant_id)]

    def __contains__(self, tenant_id: Optional[str]) -> bool:
        return self._key(tenant_id) in self._documents

    def __iter__(self) -> Iterator[ConfigurationDocument]:
        with self._map_lock:
            return iter(list(self._documents.values()))

    def __len__(self) -> int:
        return len(self._documents)

    # ------------ internal ------------------------------------------- #

    def _key(self, tenant_id: Optional[str]) -> str:
        return tenant_id or self._default_key

    def _is_shared(self, tenant_id: Optional[str]) -> bool:
        return not tenant_id or tenant_id == self._default_key

    def _current_tenant_id(self) -> Optional[str]:
        if self._directory is None:
            return None
        return self._directory.current_tenant_id()

    def _label(self, tenant_id: Optional[str]) -> str:
        if self._is_shared(tenant_id):
            return "default tenant"
        name = None
        if self._directory is not None:
            try:
                name = self._directory.display_name(tenant_id)
            except Exception as exc:
                log.debug("No display name for '%s': %s", tenant_id, exc)
        return name or tenant_id

    def _reset_to_defaults(self, document: ConfigurationDocument) -> None:
        self.reconcile_field_schema(document, None)

    def _encode_or_raise(self, document: ConfigurationDocument) -> str:
        text = self._codec.encode(document)
        if text is None:
            raise TenantConfigError("Config document could not be formatted.")
        return text

    def _write(self, location: Any, text: str) -> bool:
        try:
            written = self._gateway.write(location, text)
        except OSError as exc:
            log.error("Could not write %s: %s", location, exc, exc_info=True)
            return False
        if not written:
            log.error("Could not write %s", location)
        return written

    def _decode_with_repair(
        self,
        key: str,
        location: Any,
        text: str,
        document: ConfigurationDocument,
    ) -> None:
        result = self._codec.decode(text, into=document)
        if result.status is DecodeStatus.UNRECOGNIZED:
            log.error(
                "Config for '%s' at %s has unrecognized member '%s'; removing it and retrying.",
                key,
                location,
                result.member,
            )
            cleaned = self._codec.strip_member(text, result.path)
            result = self._codec.decode(cleaned, into=document)
            if result.ok:
                log.warning("Removed member from %s and loaded config for '%s'", location, key)
        if not result.ok:
            raise DecodeFailure(key, location, result)

    def _notify_if_active(self, tenant_id: Optional[str]) -> None:
        if self._directory is None or self._task_hook is None:
            return
        try:
            if self._key(tenant_id) != self._key(self._current_tenant_id()):
                return
            self._task_hook.notify_config_changed()
        except Exception as exc:
            log.error("Task update after loading '%s' failed: %s", self._key(tenant_id), exc, exc_info=True)
