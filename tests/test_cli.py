import json

import pytest

from tenant_config_manager import SettingGroup
from tenant_config_manager.cli import main


class ForestCfg(SettingGroup):
    enabled: bool = True
    interval: int = 30


GROUPS = {"forest": ForestCfg}


def _run(tmp_path, *args):
    main(["--dir", str(tmp_path), "--registry", "test_cli:GROUPS", *args])


def test_show(tmp_path, capsys):
    _run(tmp_path, "show", "t1")
    out = json.loads(capsys.readouterr().out)
    assert out == {"forest": {"enabled": True, "interval": 30}}
    assert (tmp_path / "t1" / "config_v2.json").exists()


def test_set_and_reset(tmp_path):
    path = tmp_path / "t1" / "config_v2.json"

    _run(tmp_path, "set", "t1", "forest.interval", "45")
    _run(tmp_path, "set", "t1", "forest.enabled", "false")
    data = json.loads(path.read_text())
    assert data["setting_groups"]["forest"] == {"enabled": False, "interval": 45}

    _run(tmp_path, "reset", "t1")
    data = json.loads(path.read_text())
    assert data["setting_groups"]["forest"] == {"enabled": True, "interval": 30}


def test_set_rejects_bad_input(tmp_path):
    with pytest.raises(SystemExit):
        _run(tmp_path, "set", "t1", "forest.missing", "1")
    with pytest.raises(SystemExit):
        _run(tmp_path, "set", "t1", "forest.interval", "later")


def test_bad_registry_spec(tmp_path):
    with pytest.raises(SystemExit):
        main(["--dir", str(tmp_path), "--registry", "test_cli", "show", "t1"])
