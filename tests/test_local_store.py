from curator.core.local_store import JsonFileLocalStore, MemoryLocalStore


def test_memory_store_get_set_delete():
    store = MemoryLocalStore()
    assert store.get("k") is None
    store.set("k", "v")
    assert store.get("k") == "v"
    store.delete("k")
    store.delete("k")
    assert store.get("k") is None


def test_json_store_persists_across_instances(tmp_path):
    JsonFileLocalStore(tmp_path, "browser-1").set("k", "v")

    assert JsonFileLocalStore(tmp_path, "browser-1").get("k") == "v"
    assert JsonFileLocalStore(tmp_path, "browser-2").get("k") is None


def test_json_store_sanitizes_client_id(tmp_path):
    store = JsonFileLocalStore(tmp_path, "../../etc/passwd")
    store.set("k", "v")

    assert store.path.parent == tmp_path
    assert store.get("k") == "v"


def test_json_store_ignores_corrupt_file(tmp_path):
    store = JsonFileLocalStore(tmp_path, "browser")
    store.path.write_text("{not json", encoding="utf-8")

    assert store.get("k") is None
    store.set("k", "v")
    assert store.get("k") == "v"


def test_json_store_delete(tmp_path):
    store = JsonFileLocalStore(tmp_path, "browser")
    store.set("a", "1")
    store.set("b", "2")
    store.delete("a")

    assert store.get("a") is None
    assert store.get("b") == "2"


def test_json_store_keeps_ids_that_sanitize_alike_apart(tmp_path):
    slash = JsonFileLocalStore(tmp_path, "a/b")
    underscore = JsonFileLocalStore(tmp_path, "a_b")
    slash.set("k", "slash")
    underscore.set("k", "underscore")

    assert slash.path != underscore.path
    assert slash.path.name.startswith("a_b-")
    assert JsonFileLocalStore(tmp_path, "a/b").get("k") == "slash"
    assert JsonFileLocalStore(tmp_path, "a_b").get("k") == "underscore"
