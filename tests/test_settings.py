import tempfile
from pathlib import Path

from tenant_config_manager import FileGateway, ModelRegistry, SettingGroup, StoreSettings, TenantConfigStore


class ForestCfg(SettingGroup):
    interval: int = 30


def test_defaults(monkeypatch):
    for var in ("CONFIG_DIR", "FILE_NAME", "FILE_FORMAT", "DEFAULT_TENANT_KEY"):
        monkeypatch.delenv(f"TENANT_CONFIG_{var}", raising=False)

    settings = StoreSettings()
    assert settings.config_dir == Path(tempfile.gettempdir()) / "tenant_config_manager"
    assert settings.file_name == "config_v2.json"
    assert settings.resolved_format == "json"
    assert settings.default_tenant_key == "default"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("TENANT_CONFIG_CONFIG_DIR", str(tmp_path))
    monkeypatch.setenv("TENANT_CONFIG_FILE_NAME", "tenant.toml")
    monkeypatch.setenv("TENANT_CONFIG_DEFAULT_TENANT_KEY", "shared")

    settings = StoreSettings()
    assert settings.config_dir == tmp_path
    assert settings.resolved_format == "toml"

    store = TenantConfigStore.from_settings(ModelRegistry({"forest": ForestCfg}), settings)
    assert isinstance(store.gateway, FileGateway)
    assert store.codec.file_format == "toml"
    assert store.location_for("shared") == tmp_path.resolve() / "tenant.toml"
    assert store.location_for("t1") == tmp_path.resolve() / "t1" / "tenant.toml"
    assert store.get_or_create("") is store.get_or_create("shared")


def test_explicit_format_wins(tmp_path):
    settings = StoreSettings(config_dir=tmp_path, file_name="config.cfg", file_format="yaml")
    assert settings.resolved_format == "yaml"


def test_format_description_warns_about_toml_nulls():
    description = StoreSettings.model_fields["file_format"].description
    assert "TOML" in description
    assert "None" in description
