import pytest
from sqlalchemy.exc import OperationalError

from models import Repository
from services.repositories import create_repository


FILES = {"src/app.py": "print('hi')", "README.md": "# Demo"}


def _create(db_session, store):
    return create_repository(
        db_session,
        store,
        name="demo",
        source_type="upload",
        files=FILES,
        total_size=sum(len(content) for content in FILES.values()),
    )


def test_create_repository_stores_files_and_row(db_session, store):
    repository = _create(db_session, store)

    assert db_session.get(Repository, repository.id) is not None
    assert repository.file_count == 2
    assert store.get(f"repositories/{repository.id}/src/app.py") == "print('hi')"


def test_failed_commit_removes_stored_files(db_session, store, monkeypatch):
    def failing_commit():
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "commit", failing_commit)

    with pytest.raises(OperationalError):
        _create(db_session, store)

    assert store.list("repositories") == []
    monkeypatch.undo()
    assert db_session.query(Repository).count() == 0


def test_delete_prefix_only_touches_its_repository(store):
    store.put("repositories/r1/a.py", "a")
    store.put("repositories/r2/b.py", "b")

    store.delete_prefix("repositories/r1")
    store.delete_prefix("repositories/missing")

    assert [obj.key for obj in store.list("repositories")] == ["repositories/r2/b.py"]
