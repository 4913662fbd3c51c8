# =============================================================
#  tenant_config_manager/fields.py
# =============================================================
from __future__ import annotations

import copy
from typing import Any, Optional

from pydantic import TypeAdapter

__all__ = ["FieldValue", "FieldSet"]


class FieldValue:
    """
    One setting inside a group.

    Holds the field *code*, the current value and the declared default.
    ``annotation`` is the declared type; values copied from loaded data go
    through a pydantic ``TypeAdapter`` built from it.
    """

    def __init__(
        self,
        code: str,
        default: Any = None,
        *,
        annotation: Any = Any,
        description: Optional[str] = None,
    ):
        self.code = code
        self.annotation = annotation
        self.description = description
        self._default = copy.deepcopy(default)
        self._adapter: TypeAdapter | None = None
        self.value: Any = copy.deepcopy(default)

    @property
    def default(self) -> Any:
        return copy.deepcopy(self._default)

    def reset(self) -> None:
        self.value = copy.deepcopy(self._default)

    def set_object_value(self, value: Any) -> None:
        """Coerce *value* through the declared type and store it.

        Raises ``pydantic.ValidationError`` when the value does not fit.
        """
        if self._adapter is None:
            self._adapter = TypeAdapter(self.annotation)
        self.value = self._adapter.validate_python(value)

    def __repr__(self) -> str:
        return f"FieldValue(code={self.code!r}, value={self.value!r})"


class FieldSet(dict):
    """Field code → :class:`FieldValue` for one setting group."""

    def add_field(self, field: FieldValue) -> FieldValue:
        self[field.code] = field
        return field

    def values_by_code(self) -> dict[str, Any]:
        return {code: field.value for code, field in self.items()}
