import threading

import pytest

from tenant_config_manager import ConfigurationDocument, FieldSet, FieldValue


def _document() -> ConfigurationDocument:
    doc = ConfigurationDocument()
    forest = FieldSet()
    forest.add_field(FieldValue("enabled", True, annotation=bool))
    forest.add_field(FieldValue("interval", 30, annotation=int))
    doc.replace_groups({"forest": forest})
    return doc


def test_new_document_is_empty_and_not_initialized():
    doc = ConfigurationDocument()
    assert doc.initialized is False
    assert doc.setting_groups == {}
    assert doc.snapshot() == {}


def test_path_access():
    doc = _document()
    assert doc.get_value("forest.interval") == 30
    assert doc.get_value("forest.missing") is None
    assert doc.get_value("nope.interval", 5) == 5

    doc.set_value("forest.interval", "45")
    assert doc.get_value("forest.interval") == 45

    with pytest.raises(KeyError):
        doc.set_value("forest.missing", 1)
    with pytest.raises(ValueError):
        doc.set_value("forest.interval", "soon")


def test_group_and_field_queries():
    doc = _document()
    assert doc.has_group("forest")
    assert not doc.has_group("farm")
    assert doc.has_field("forest", "enabled")
    assert not doc.has_field("forest", "speed")
    assert not doc.has_field("farm", "enabled")
    assert doc.get_field("forest", "enabled").code == "enabled"


def test_reset_fields_in_place():
    doc = _document()
    field = doc.get_field("forest", "interval")
    doc.set_value("forest.interval", 90)

    doc.reset_fields()
    assert field.value == 30
    assert doc.get_field("forest", "interval") is field


def test_group_for_update_creates_once():
    doc = ConfigurationDocument()
    first = doc.group_for_update("farm")
    assert doc.group_for_update("farm") is first
    assert doc.group_codes() == ["farm"]


def test_merge_updates_known_and_adds_unknown_fields():
    doc = _document()
    field = doc.get_field("forest", "interval")

    doc.merge({"forest": {"interval": 5, "speed": 2}, "farm": {"feed": True}})

    assert doc.get_field("forest", "interval") is field
    assert field.value == 5
    assert doc.get_value("forest.speed") == 2
    assert doc.get_value("farm.feed") is True


def test_merge_waits_for_document_lock():
    doc = _document()
    done = threading.Event()

    def merge():
        doc.merge({"forest": {"interval": 99}})
        done.set()

    with doc._lock:
        worker = threading.Thread(target=merge)
        worker.start()
        assert not done.wait(0.2)
        assert doc.get_value("forest.interval") == 30
    worker.join(timeout=2)
    assert done.is_set()
    assert doc.get_value("forest.interval") == 99
