import pytest

from services.storage import BlobStore, StorageError, repository_prefix


def test_put_get_roundtrip(store):
    stored = store.put("repositories/r1/src/app.py", "print('héllo')")
    assert stored.size == len("print('héllo')".encode("utf-8"))
    assert store.get("repositories/r1/src/app.py") == "print('héllo')"


def test_get_missing_returns_none(store):
    assert store.get("repositories/r1/missing.py") is None


def test_list_returns_sorted_keys_under_prefix(store):
    store.put("repositories/r1/b.py", "b")
    store.put("repositories/r1/a/c.py", "c")
    store.put("repositories/r2/other.py", "x")

    keys = [obj.key for obj in store.list("repositories/r1/")]
    assert keys == ["repositories/r1/a/c.py", "repositories/r1/b.py"]
    assert store.list("repositories/nothing") == []


@pytest.mark.parametrize("key", ["../escape.txt", "repositories/../../etc/passwd", "/etc/passwd", ""])
def test_traversal_is_rejected(store, key):
    with pytest.raises(StorageError):
        store.get(key)


def test_repository_prefix():
    assert repository_prefix("abc") == "repositories/abc"


def test_store_creates_root_lazily(tmp_path):
    store = BlobStore(tmp_path / "nested" / "root")
    store.put("k/v.txt", "v")
    assert (tmp_path / "nested" / "root" / "k" / "v.txt").read_text() == "v"
