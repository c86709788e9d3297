import pytest

from cashtracker.infra.store import DuplicateError, MemoryStore, StoreError, YamlStore, open_store


def test_create_assigns_ids_and_timestamps():
    store = MemoryStore()
    a = store.create("budgets", {"name": "A"})
    b = store.create("budgets", {"name": "B"})
    assert (a["id"], b["id"]) == (1, 2)
    assert a["created_at"] and a["updated_at"]


def test_find_one_and_find_all():
    store = MemoryStore()
    store.create("accounts", {"email": "a@test.com", "token": "111111"})
    store.create("accounts", {"email": "b@test.com", "token": None})
    assert store.find_one("accounts", token="111111")["email"] == "a@test.com"
    assert store.find_one("accounts", email="c@test.com") is None
    assert [r["email"] for r in store.find_all("accounts")] == ["a@test.com", "b@test.com"]


def test_returned_records_are_copies():
    store = MemoryStore()
    rec = store.create("budgets", {"name": "A"})
    rec["name"] = "changed"
    assert store.get("budgets", rec["id"])["name"] == "A"


def test_update_keeps_id_and_created_at():
    store = MemoryStore()
    rec = store.create("budgets", {"name": "A"})
    updated = store.update("budgets", rec["id"], {"name": "B", "id": 99, "created_at": "x"})
    assert updated["id"] == rec["id"]
    assert updated["created_at"] == rec["created_at"]
    assert updated["name"] == "B"


def test_update_missing_record_raises():
    with pytest.raises(StoreError):
        MemoryStore().update("budgets", 1, {"name": "B"})


def test_delete():
    store = MemoryStore()
    rec = store.create("budgets", {"name": "A"})
    assert store.delete("budgets", rec["id"]) is True
    assert store.delete("budgets", rec["id"]) is False
    assert store.get("budgets", rec["id"]) is None


def test_yaml_store_persists_between_instances(tmp_path):
    path = tmp_path / "data" / "cashtracker.yml"
    first = YamlStore(path)
    first.create("accounts", {"email": "a@test.com", "confirmed": False})
    first.create("accounts", {"email": "b@test.com", "confirmed": True})

    second = YamlStore(path)
    assert second.find_one("accounts", email="b@test.com")["confirmed"] is True
    assert second.create("accounts", {"email": "c@test.com"})["id"] == 3


def test_create_rejects_taken_unique_value():
    store = MemoryStore()
    store.create("accounts", {"email": "a@test.com"}, unique=("email",))
    with pytest.raises(DuplicateError):
        store.create("accounts", {"email": "a@test.com"}, unique=("email",))
    assert len(store.find_all("accounts")) == 1
    assert store.create("accounts", {"email": "b@test.com"}, unique=("email",))["id"] == 2


def test_yaml_store_unique_check_sees_other_writers(tmp_path):
    path = tmp_path / "db.yml"
    first, second = YamlStore(path), YamlStore(path)
    first.create("accounts", {"email": "a@test.com"}, unique=("email",))
    with pytest.raises(DuplicateError):
        second.create("accounts", {"email": "a@test.com"}, unique=("email",))


def test_yaml_store_rolls_back_failed_write(tmp_path, monkeypatch):
    path = tmp_path / "db.yml"
    store = YamlStore(path)
    kept = store.create("accounts", {"email": "a@test.com"})

    def boom(self, *args, **kwargs):
        raise OSError("disk full")

    with monkeypatch.context() as m:
        m.setattr(type(path), "write_text", boom)
        with pytest.raises(StoreError):
            store.create("accounts", {"email": "b@test.com"})
        with pytest.raises(StoreError):
            store.update("accounts", kept["id"], {"email": "changed@test.com"})
        with pytest.raises(StoreError):
            store.delete("accounts", kept["id"])

    assert store.find_one("accounts", email="b@test.com") is None
    assert store.get("accounts", kept["id"])["email"] == "a@test.com"
    assert store.create("accounts", {"email": "c@test.com"})["id"] == 2
    assert [r["email"] for r in YamlStore(path).find_all("accounts")] == ["a@test.com", "c@test.com"]


def test_yaml_store_rejects_corrupt_file(tmp_path):
    path = tmp_path / "broken.yml"
    path.write_text("tables: [unclosed", encoding="utf-8")
    with pytest.raises(StoreError):
        YamlStore(path)


def test_open_store_selects_backend(monkeypatch, tmp_path):
    monkeypatch.setenv("CASHTRACKER_STORE", "yaml")
    monkeypatch.setenv("CASHTRACKER_DATA_PATH", str(tmp_path / "db.yml"))
    assert isinstance(open_store(), YamlStore)

    monkeypatch.setenv("CASHTRACKER_STORE", "memory")
    assert type(open_store()) is MemoryStore

    monkeypatch.setenv("CASHTRACKER_STORE", "postgres")
    with pytest.raises(RuntimeError):
        open_store()
