# =============================================================
#  tenant_config_manager/document.py
# =============================================================
from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .fields import FieldSet, FieldValue

__all__ = ["ConfigurationDocument"]


class ConfigurationDocument:
    """
    The settings of one tenant.

    ``setting_groups`` maps a group code to its :class:`FieldSet`. Replacing
    the mapping and taking snapshots happen under the document lock; single
    field values may be edited from any thread.
    """

    def __init__(self) -> None:
        self.initialized: bool = False
        self._lock = threading.RLock()
        self._groups: Dict[str, FieldSet] = {}

    # ------------ groups --------------------------------------------- #

    @property
    def setting_groups(self) -> Dict[str, FieldSet]:
        return self._groups

    def replace_groups(self, groups: Dict[str, FieldSet]) -> None:
        with self._lock:
            self._groups = groups

    def group_for_update(self, code: str) -> FieldSet:
        """Return the field set for *code*, creating an empty one if needed."""
        with self._lock:
            fields = self._groups.get(code)
            if fields is None:
                fields = self._groups[code] = FieldSet()
            return fields

    def merge(self, groups: Dict[str, Dict[str, Any]]) -> None:
        """Write raw ``{group: {field: value}}`` data over the current fields.

        Unknown groups and fields are added as untyped fields; schema
        reconciliation decides later what survives.
        """
        with self._lock:
            for group_code, payload in groups.items():
                fields = self.group_for_update(group_code)
                for field_code, value in payload.items():
                    existing = fields.get(field_code)
                    if existing is None:
                        fields.add_field(FieldValue(field_code, value))
                    else:
                        existing.value = value

    def has_group(self, code: str) -> bool:
        return code in self._groups

    def has_field(self, group: str, field: str) -> bool:
        fields = self._groups.get(group)
        return fields is not None and field in fields

    def get_field(self, group: str, field: str) -> Optional[FieldValue]:
        fields = self._groups.get(group)
        return None if fields is None else fields.get(field)

    # ------------ path API ------------------------------------------- #

    def get_value(self, path: str, default: Any | None = None) -> Any:
        """``doc.get_value('forest.interval')``"""
        group, _, field = path.partition(".")
        found = self.get_field(group, field)
        return default if found is None else found.value

    def set_value(self, path: str, value: Any) -> None:
        group, _, field = path.partition(".")
        found = self.get_field(group, field)
        if found is None:
            raise KeyError(f"Unknown setting '{path}'.")
        try:
            found.set_object_value(value)
        except ValidationError as e:
            raise ValueError(f"Validation failed setting '{path}':\n{e}") from e

    # ------------ bulk ----------------------------------------------- #

    def reset_fields(self) -> None:
        with self._lock:
            for fields in self._groups.values():
                for field in fields.values():
                    if field is not None:
                        field.reset()

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return {code: fields.values_by_code() for code, fields in list(self._groups.items())}

    def group_codes(self) -> List[str]:
        return list(self._groups)

    def __repr__(self) -> str:
        return (
            f"ConfigurationDocument(initialized={self.initialized}, "
            f"groups={self.group_codes()})"
        )
