# =============================================================
#  tenant_config_manager/registry.py
# =============================================================
"""Field registry: which setting groups exist and what their fields default to.

The store only talks to the :class:`FieldRegistry` protocol. The bundled
:class:`ModelRegistry` derives groups from pydantic models, so a group is
declared exactly like any other settings class:

```python
class ForestSettings(SettingGroup):
    enabled: bool = Field(True, description="Collect energy")
    interval: int = 30

registry = ModelRegistry({"forest": ForestSettings})
```
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence, Tuple, Type

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .fields import FieldSet, FieldValue

__all__ = [
    "FieldDefinition",
    "GroupDescriptor",
    "FieldRegistry",
    "ModelRegistry",
    "SettingGroup",
]

log = logging.getLogger(__name__)


class SettingGroup(BaseSettings):
    """Convenience base class for setting-group models."""

    model_config = SettingsConfigDict(extra="ignore")


@dataclass(frozen=True)
class FieldDefinition:
    code: str
    default: Any = None
    annotation: Any = Any
    description: Optional[str] = None

    def build(self) -> FieldValue:
        return FieldValue(
            self.code,
            self.default,
            annotation=self.annotation,
            description=self.description,
        )


@dataclass(frozen=True)
class GroupDescriptor:
    """A setting group code plus its canonical, ordered field definitions."""

    code: str
    fields: Tuple[FieldDefinition, ...] = field(default_factory=tuple)

    @classmethod
    def from_model(cls, code: str, model_cls: Type[BaseModel]) -> "GroupDescriptor":
        if not (isinstance(model_cls, type) and issubclass(model_cls, BaseModel)):
            raise TypeError("model_cls must subclass pydantic.BaseModel")
        defs = []
        for name, info in model_cls.model_fields.items():
            if info.is_required():
                raise ValueError(
                    f"Field '{code}.{name}' has no default; setting fields need one."
                )
            defs.append(
                FieldDefinition(
                    code=name,
                    default=info.get_default(call_default_factory=True),
                    annotation=info.annotation,
                    description=info.description,
                )
            )
        return cls(code=code, fields=tuple(defs))

    def build_field_set(self) -> FieldSet:
        """Return fresh field objects holding the defaults.

        Every call builds new :class:`FieldValue` instances so that two
        documents never share a field.
        """
        out = FieldSet()
        for definition in self.fields:
            out.add_field(definition.build())
        return out


class FieldRegistry(Protocol):
    def list_groups(self) -> Sequence[GroupDescriptor]: ...


class ModelRegistry:
    """Registry of setting groups backed by pydantic models."""

    def __init__(
        self,
        groups: Mapping[str, Type[BaseModel]] | Sequence[GroupDescriptor] | None = None,
    ):
        self._lock = threading.Lock()
        self._groups: Dict[str, GroupDescriptor] = {}
        if isinstance(groups, Mapping):
            for code, model_cls in groups.items():
                self.register(code, model_cls)
        else:
            for descriptor in groups or ():
                self.add(descriptor)

    def register(self, code: str, model_cls: Type[BaseModel]) -> GroupDescriptor:
        return self.add(GroupDescriptor.from_model(code, model_cls))

    def add(self, descriptor: GroupDescriptor) -> GroupDescriptor:
        with self._lock:
            if descriptor.code in self._groups:
                log.debug("Replacing setting group '%s'", descriptor.code)
            self._groups[descriptor.code] = descriptor
        return descriptor

    def unregister(self, code: str) -> None:
        with self._lock:
            del self._groups[code]

    def list_groups(self) -> Sequence[GroupDescriptor]:
        with self._lock:
            return tuple(self._groups.values())

    def __contains__(self, code: str) -> bool:
        return code in self._groups

    def __len__(self) -> int:
        return len(self._groups)
