from __future__ import annotations

import pytest
from pydantic import ValidationError

from models import Project, Slide
from projects_store import JsonFileProjectStore


def test_save_then_get(tmp_path):
    store = JsonFileProjectStore(tmp_path / "projects")
    project = Project(id="proj-1", name=" Model House ", slides=[Slide(title="Cover", imageUrl="/img/a.png")])

    store.save(project)
    loaded = store.get("proj-1")

    assert loaded is not None
    assert loaded.name == "Model House"
    assert loaded.slides[0].image_url == "/img/a.png"
    assert (tmp_path / "projects" / "proj-1.json").is_file()


def test_get_unknown_and_list_empty(tmp_path):
    store = JsonFileProjectStore(tmp_path / "missing")

    assert store.get("proj-1") is None
    assert store.list() == []


def test_list_sorted_by_id(tmp_path):
    store = JsonFileProjectStore(tmp_path)
    for pid in ("b", "a", "c"):
        store.save(Project(id=pid))

    assert [p.id for p in store.list()] == ["a", "b", "c"]


@pytest.mark.parametrize("bad_id", ["", "../x", "a/b", "a.b"])
def test_invalid_ids_are_rejected(tmp_path, bad_id):
    store = JsonFileProjectStore(tmp_path)

    with pytest.raises(ValueError):
        store.get(bad_id)
    with pytest.raises(ValidationError):
        Project(id=bad_id)


def test_project_endpoints(client):
    res = client.put(
        "/projects/proj-7",
        json={"name": "Sato", "customerName": "Sato Family", "slides": [{"title": "Cover"}]},
    )
    assert res.status_code == 200
    assert res.json()["id"] == "proj-7"
    assert res.json()["customer_name"] == "Sato Family"

    got = client.get("/projects/proj-7")
    assert got.status_code == 200
    assert got.json()["slides"][0]["title"] == "Cover"

    assert [p["id"] for p in client.get("/projects").json()] == ["proj-7"]
    assert client.get("/projects/unknown").status_code == 404


def test_put_project_with_invalid_id_is_400(client):
    res = client.put("/projects/bad.id", json={"name": "x"})

    assert res.status_code == 400


def test_list_skips_unreadable_files(tmp_path):
    store = JsonFileProjectStore(tmp_path)
    store.save(Project(id="good"))
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "wrong-shape.json").write_text('{"id": "bad.id"}', encoding="utf-8")

    assert [p.id for p in store.list()] == ["good"]


def test_projects_endpoint_survives_corrupt_file(client, tmp_path):
    client.put("/projects/proj-1", json={"name": "Kept"})
    (tmp_path / "projects" / "corrupt.json").write_text("", encoding="utf-8")

    res = client.get("/projects")

    assert res.status_code == 200
    assert [p["id"] for p in res.json()] == ["proj-1"]
