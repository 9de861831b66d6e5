from __future__ import annotations

import itertools

import pytest

from ideaforge.core.projects.store import ProjectStore
from ideaforge.core.runtime.errors import (
    ErrorCode,
    InputValidationError,
    InvalidProjectStructure,
    ProjectNotFound,
    StorageFailure,
)
from ideaforge.db.session import create_session_factory, init_db

TREE = [
    {"id": "n1", "title": "Root", "content": "Root", "parentId": None, "level": 0},
    {"id": "n2", "title": "Child", "content": "Detail", "parentId": "n1", "level": 1},
]


@pytest.fixture()
def store(tmp_path):
    session_factory, engine = create_session_factory(f"sqlite:///{tmp_path / 'projects.db'}")
    init_db(engine)
    ticks = itertools.count(1000, 10)
    return ProjectStore(session_factory, clock=lambda: next(ticks))


def test_save_get_roundtrip(store):
    saved = store.save("p1", "Kites", TREE)
    assert saved == {"id": "p1", "name": "Kites", "savedAt": 1000}

    project = store.get("p1")
    assert project["ideaTree"] == TREE
    assert project["createdAt"] == project["updatedAt"] == 1000


def test_resave_keeps_created_at(store):
    store.save("p1", "Kites", TREE)
    store.save("p1", "Kites v2", TREE[:1])

    project = store.get("p1")
    assert project["name"] == "Kites v2"
    assert project["ideaTree"] == TREE[:1]
    assert project["createdAt"] == 1000
    assert project["updatedAt"] == 1010


def test_list_is_most_recent_first_without_trees(store):
    store.save("old", "Old", TREE)
    store.save("new", "New", TREE)

    listed = store.list_projects()
    assert [p["id"] for p in listed] == ["new", "old"]
    assert all("ideaTree" not in p for p in listed)


@pytest.mark.parametrize("args", [(None, "n", TREE), ("p", "", TREE), ("p", "n", None)])
def test_save_requires_all_fields(store, args):
    with pytest.raises(InputValidationError):
        store.save(*args)


def test_missing_project_is_not_found(store):
    with pytest.raises(ProjectNotFound) as info:
        store.get("nope")
    assert info.value.code is ErrorCode.NOT_FOUND
    with pytest.raises(ProjectNotFound):
        store.delete("nope")


def test_delete_removes_project(store):
    store.save("p1", "Kites", TREE)
    assert store.delete("p1") == {"id": "p1", "deleted": True}
    assert store.list_projects() == []


def test_import_assigns_fresh_id_and_marks_name(store):
    first = store.import_project({"name": "Shared", "ideaTree": TREE})
    second = store.import_project({"ideaTree": []})

    assert first["name"] == "Shared (imported)"
    assert first["imported"] is True
    assert first["id"] != second["id"]
    assert second["name"] == "Imported Project"
    assert store.get(first["id"])["ideaTree"] == TREE


@pytest.mark.parametrize("data", [{"name": "x"}, {"ideaTree": {"not": "a list"}}, ["wrong"], None])
def test_import_rejects_bad_structure(store, data):
    with pytest.raises(InvalidProjectStructure):
        store.import_project(data)


def test_database_errors_surface_as_storage_failure(tmp_path):
    session_factory, _engine = create_session_factory(f"sqlite:///{tmp_path / 'empty.db'}")
    # No init_db: the projects table does not exist.
    bare = ProjectStore(session_factory)
    with pytest.raises(StorageFailure) as info:
        bare.list_projects()
    assert info.value.code is ErrorCode.DATABASE_ERROR
    assert info.value.http_status == 500
