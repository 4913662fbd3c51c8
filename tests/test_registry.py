from typing import List, Optional

import pytest
from pydantic import BaseModel

from tenant_config_manager import (
    Field,
    FieldDefinition,
    GroupDescriptor,
    ModelRegistry,
    SettingGroup,
)


class ForestCfg(SettingGroup):
    enabled: bool = Field(True, description="Collect energy")
    interval: int = 30
    friends: List[str] = Field(default_factory=list)
    nickname: Optional[str] = None


class NeedsValue(BaseModel):
    token: str


def test_descriptor_from_model():
    desc = GroupDescriptor.from_model("forest", ForestCfg)

    assert desc.code == "forest"
    assert [f.code for f in desc.fields] == ["enabled", "interval", "friends", "nickname"]
    enabled = desc.fields[0]
    assert enabled.default is True
    assert enabled.annotation is bool
    assert enabled.description == "Collect energy"
    assert desc.fields[2].default == []


def test_descriptor_rejects_bad_models():
    with pytest.raises(ValueError):
        GroupDescriptor.from_model("bad", NeedsValue)
    with pytest.raises(TypeError):
        GroupDescriptor.from_model("bad", dict)


def test_build_field_set_returns_fresh_fields():
    desc = GroupDescriptor.from_model("forest", ForestCfg)
    first = desc.build_field_set()
    second = desc.build_field_set()

    assert first["interval"] is not second["interval"]
    first["friends"].value.append("bob")
    assert second["friends"].value == []


def test_registry_register_and_unregister():
    registry = ModelRegistry({"forest": ForestCfg})
    assert "forest" in registry
    assert len(registry) == 1

    registry.add(GroupDescriptor("farm", (FieldDefinition("feed", True, bool),)))
    assert [g.code for g in registry.list_groups()] == ["forest", "farm"]

    registry.unregister("forest")
    assert [g.code for g in registry.list_groups()] == ["farm"]


def test_registry_from_descriptors():
    registry = ModelRegistry([GroupDescriptor("farm", (FieldDefinition("feed", True),))])
    (group,) = registry.list_groups()
    assert group.build_field_set()["feed"].value is True
