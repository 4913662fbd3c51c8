import json
import os
import time

from tenant_config_manager import FileGateway, ModelRegistry, SettingGroup, TenantConfigStore, watch_and_reload


class ForestCfg(SettingGroup):
    enabled: bool = True
    interval: int = 30


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return False


def test_watch_and_reload(tmp_path):
    store = TenantConfigStore(ModelRegistry({"forest": ForestCfg}), FileGateway(tmp_path))
    doc = store.load("t1")
    thread, stop = watch_and_reload(store, ["t1"], debounce=100)

    # Give watcher time to start
    time.sleep(0.3)

    path = tmp_path / "t1" / "config_v2.json"
    data = json.loads(path.read_text())
    data["setting_groups"]["forest"]["interval"] = 9
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        json.dump(data, f)
        f.flush()
        os.fsync(f.fileno())

    try:
        assert _wait_for(lambda: doc.get_value("forest.interval") == 9)
    finally:
        stop.set()
        thread.join(timeout=2)


def test_nothing_to_watch(tmp_path):
    store = TenantConfigStore(ModelRegistry({"forest": ForestCfg}), FileGateway(tmp_path))
    thread, stop = watch_and_reload(store)
    thread.join(timeout=1)
    assert not thread.is_alive()
