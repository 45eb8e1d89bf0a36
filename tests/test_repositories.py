"""Tests for the project repositories."""
import asyncio
import json

import pytest

from adapters.json_repository import JsonFileProjectRepository
from adapters.memory_repository import InMemoryProjectRepository
from core.domain.models import PlanTier, Project


def _project(pid="p" * 24, owner="owner", **kwargs):
    return Project(id=pid, name="Marketing", user_id=owner, **kwargs)


@pytest.fixture(params=["memory", "json"])
def repo(request, tmp_path):
    if request.param == "memory":
        return InMemoryProjectRepository()
    return JsonFileProjectRepository(tmp_path / "nested" / "projects.json")


def test_save_get_roundtrip(repo, run):
    project = _project(plan=PlanTier.PREMIUM, data_info={"a" * 24: {"Budget": {"value": 1}}})
    run(repo.save(project))
    loaded = run(repo.get(project.id))
    assert loaded == project


def test_get_missing_returns_none(repo, run):
    assert run(repo.get("missing")) is None


def test_returned_documents_are_copies(repo, run):
    run(repo.save(_project()))
    loaded = run(repo.get("p" * 24))
    loaded.data_info["x"] = 1
    assert run(repo.get("p" * 24)).data_info == {}


def test_delete(repo, run):
    run(repo.save(_project()))
    assert run(repo.delete("p" * 24)) is True
    assert run(repo.delete("p" * 24)) is False
    assert run(repo.get("p" * 24)) is None


def test_find_by_owner(repo, run):
    run(repo.save(_project("1" * 24, owner="a")))
    run(repo.save(_project("2" * 24, owner="b")))
    run(repo.save(_project("3" * 24, owner="a")))
    assert [p.id for p in run(repo.find_by_owner("a"))] == ["1" * 24, "3" * 24]


def test_json_file_uses_wire_names(tmp_path, run):
    path = tmp_path / "projects.json"
    repo = JsonFileProjectRepository(path)
    run(repo.save(_project(data_info={"a" * 24: {"k": "v"}})))

    document = json.loads(path.read_text(encoding="utf-8"))["projects"][0]
    assert document["_id"] == "p" * 24
    assert document["userId"] == "owner"
    assert document["dataInfo"] == {"a" * 24: {"k": "v"}}
    assert document["plan"] == "free"
    assert not list(tmp_path.glob(".projects-*"))


def test_json_file_preserves_entry_order(tmp_path, run):
    repo = JsonFileProjectRepository(tmp_path / "projects.json")
    order = ["c" * 24, "a" * 24, "b" * 24]
    run(repo.save(_project(data_info={k: {k[0]: 1} for k in order})))
    assert list(run(repo.get("p" * 24)).data_info) == order


def test_json_file_tolerates_empty_file(tmp_path, run):
    path = tmp_path / "projects.json"
    path.write_text("", encoding="utf-8")
    assert run(JsonFileProjectRepository(path).find_by_owner("x")) == []


def test_json_file_concurrent_saves_keep_every_project(tmp_path, run):
    repo = JsonFileProjectRepository(tmp_path / "projects.json")
    ids = [str(n) * 24 for n in range(1, 6)]

    async def save_all():
        await asyncio.gather(*(repo.save(_project(pid)) for pid in ids))
        return await repo.find_by_owner("owner")

    assert sorted(p.id for p in run(save_all())) == ids
