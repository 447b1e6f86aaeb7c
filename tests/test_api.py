from __future__ import annotations

import locale

import pytest
from fastapi.testclient import TestClient

from tracker.config import settings
from tracker.main import app
from tracker.models import EssaySortMode, SortMode
from tracker.services.tracker_service import tracker_service


@pytest.fixture
def client(db_path, monkeypatch):
    """App over a fresh database, so the seed data is loaded on startup."""
    monkeypatch.setattr(settings, "data_dir", db_path.parent)
    tracker_service.set_view_state(
        sort_mode=SortMode.DEADLINE_ASC,
        essay_sort_mode=EssaySortMode.DEADLINE_ASC,
        selected_tag_ids=[],
        search_query="",
    )
    with TestClient(app) as c:
        yield c


def ids(response) -> list[str]:
    assert response.status_code == 200, response.text
    return [item["id"] for item in response.json()]


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "applications": 3, "pendingEdits": 0}


def test_seed_listing_and_search(client):
    assert ids(client.get("/api/applications/")) == ["a3", "a1", "a2"]
    assert ids(client.get("/api/applications/", params={"q": "stanford;research"})) == ["a1"]
    # the search stays in effect for later listings
    assert ids(client.get("/api/applications/")) == ["a1"]
    assert client.get("/api/view/state").json()["searchQuery"] == "stanford;research"


def test_tag_filter_and_sort_params(client):
    r = client.get(
        "/api/applications/",
        params={"tags": ["st1", "st5"], "sort": "schoolName-desc"},
    )
    assert ids(r) == ["a1", "a2"]
    state = client.get("/api/view/state").json()
    assert state["sortMode"] == "schoolName-desc"
    assert state["selectedTagIds"] == ["st1", "st5"]


def test_unknown_sort_mode_is_rejected(client):
    assert client.get("/api/applications/", params={"sort": "random"}).status_code == 422


def test_responses_use_camel_case(client):
    body = client.get("/api/applications/a1").json()
    assert body["schoolName"] == "Stanford University"
    assert body["tagIds"] == ["st1", "st5"]
    assert len(body["checklist"]) == 3


def test_create_application_and_essay(client):
    r = client.post("/api/applications/", json={"schoolName": "Yale", "deadline": "2025-01-02"})
    assert r.status_code == 201
    created = r.json()
    assert [item["text"] for item in created["checklist"]] == settings.default_checklist
    assert created["notes"] == ""

    r = client.post("/api/essays/", json={"applicationId": "a1", "prompt": "Roommate letter"})
    assert r.status_code == 201
    assert r.json()["order"] == 2

    r = client.post("/api/essays/", json={"applicationId": "nope", "prompt": "x"})
    assert r.status_code == 404


def test_invalid_application_is_rejected(client):
    r = client.post("/api/applications/", json={"schoolName": "", "deadline": "2025-01-02"})
    assert r.status_code == 422


def test_completion_endpoint(client):
    assert client.get("/api/applications/a1/completion").json()["completion"] == 0
    client.post("/api/essays/e1/toggle")
    assert client.get("/api/applications/a1/completion").json()["completion"] == pytest.approx(20.0)
    assert client.get("/api/applications/nope/completion").status_code == 404


def test_checklist_endpoints(client):
    r = client.post("/api/applications/a3/checklist", json={"text": "Send scores"})
    assert r.status_code == 201
    task_id = r.json()["id"]
    assert client.post(f"/api/applications/a3/checklist/{task_id}/toggle").json() == {"toggled": True}
    checklist = client.get("/api/applications/a3").json()["checklist"]
    assert checklist[-1] == {"id": task_id, "text": "Send scores", "completed": True}
    assert client.delete(f"/api/applications/a3/checklist/{task_id}").json() == {"deleted": True}
    assert client.delete(f"/api/applications/a3/checklist/{task_id}").json() == {"deleted": False}


def test_reorder(client):
    client.post("/api/essays/", json={"applicationId": "a1", "prompt": "Third"})
    r = client.post(
        "/api/applications/a1/essays/reorder",
        json={"draggedEssayId": "e1", "targetEssayId": "e2"},
    )
    assert r.status_code == 200
    essays = r.json()
    assert [e["id"] for e in essays[:2]] == ["e2", "e1"]
    assert [e["order"] for e in essays] == [0, 1, 2]


def test_essay_history(client):
    client.post("/api/essays/e1/commit", json={"currentText": "v1"})
    r = client.post("/api/essays/e1/commit", json={"currentText": "v2"})
    body = r.json()
    assert body["text"] == "v2"
    assert [v["text"] for v in body["history"]] == ["v2", "v1"]

    r = client.post("/api/essays/e1/restore/1")
    assert r.json()["text"] == "v1"
    assert len(r.json()["history"]) == 2
    assert client.post("/api/essays/e1/restore/9").status_code == 404


def test_essay_view(client):
    assert ids(client.get("/api/essays/")) == ["e1", "e2", "e3"]
    r = client.get("/api/essays/", params={"sort": "schoolName-asc", "q": "town"})
    assert ids(r) == ["e3"]


def test_tag_delete_cascades(client):
    client.get("/api/applications/", params={"tags": ["st1"]})
    assert client.delete("/api/tags/st1").json() == {"deleted": True}
    assert client.get("/api/applications/a1").json()["tagIds"] == ["st5"]
    assert client.get("/api/view/state").json()["selectedTagIds"] == []
    assert "st1" not in [t["id"] for t in client.get("/api/tags/").json()]


def test_tags_by_type(client):
    school = client.get("/api/tags/", params={"type": "school"}).json()
    assert [t["name"] for t in school] == ["Private", "Public", "Reach", "Safety", "Target"]
    r = client.post("/api/tags/", json={"name": "Legacy", "color": "lime", "type": "school"})
    assert r.status_code == 201
    r = client.patch(f"/api/tags/{r.json()['id']}", json={"color": "not-a-color"})
    assert r.status_code == 422


def test_progress_and_dashboard(client):
    assert client.get("/api/view/progress").json() == {
        "submittedApplications": 1,
        "totalApplications": 3,
        "completedEssays": 0,
        "totalEssays": 3,
    }
    dashboard = client.get("/api/view/dashboard", params={"today": "2025-01-01"}).json()
    assert [u["application"]["id"] for u in dashboard["upcomingDeadlines"]] == ["a1", "a2"]
    board = client.get("/api/view/board").json()
    assert [a["id"] for a in board["Submitted"]] == ["a3"]


def test_refresh_sort(client):
    first = client.post("/api/view/refresh-sort").json()["refreshCounter"]
    assert client.post("/api/view/refresh-sort").json()["refreshCounter"] == first + 1


def test_import_requires_confirmation_and_valid_data(client):
    exported = client.get("/api/data/export").json()
    exported["applications"] = exported["applications"][2:]
    exported["essays"] = []

    assert client.post("/api/data/import", json=exported).status_code == 409
    r = client.post("/api/data/import", params={"confirm": "true"}, json={"applications": []})
    assert r.status_code == 400
    assert r.json()["detail"].startswith("Invalid data file format")

    r = client.post("/api/data/import", params={"confirm": "true"}, json=exported)
    assert r.status_code == 200
    assert ids(client.get("/api/applications/")) == ["a3"]

    r = client.post("/api/data/reset", params={"confirm": "true"})
    assert [a["id"] for a in r.json()["applications"]] == ["a1", "a2", "a3"]


def test_export_view(client):
    client.get("/api/applications/", params={"q": "berkeley"})
    body = client.get("/api/data/export/view").json()
    assert body["searchQuery"] == "berkeley"
    assert [a["schoolName"] for a in body["applications"]] == ["University of California, Berkeley"]


def test_debounced_notes_are_flushed_on_shutdown(db_path, monkeypatch):
    monkeypatch.setattr(settings, "data_dir", db_path.parent)
    with TestClient(app) as c:
        for notes in ["d", "dr", "draft"]:
            assert c.put("/api/applications/a2/notes", json={"notes": notes}).status_code == 202
        assert c.put("/api/applications/nope/notes", json={"notes": "x"}).status_code == 404
    assert tracker_service.store.get_application("a2").notes == "draft"


def test_cancelled_text_edit_is_never_written(db_path, monkeypatch):
    monkeypatch.setattr(settings, "data_dir", db_path.parent)
    with TestClient(app) as c:
        assert c.put("/api/essays/e3/text", json={"text": "scratch"}).status_code == 202
        assert c.get("/health").json()["pendingEdits"] == 1
        assert c.delete("/api/essays/e3/text").json() == {"cancelled": True}
        assert c.delete("/api/essays/e3/text").json() == {"cancelled": False}
    assert tracker_service.store.get_essay("e3").text == "Growing up in a small town..."


def test_patch_rejects_null_for_required_fields(client):
    r = client.patch("/api/applications/a1", json={"schoolName": None})
    assert r.status_code == 422
    r = client.patch("/api/essays/e1", json={"tagIds": None})
    assert r.status_code == 422
    assert client.get("/api/applications/a1").json()["schoolName"] == "Stanford University"

    r = client.patch("/api/applications/a1", json={"decisionDate": None, "notes": "kept"})
    assert r.status_code == 200
    assert r.json()["notes"] == "kept"


def test_compare_endpoint(client):
    for app_id, tuition, aid in [("a1", 82000, 60000), ("a3", 45000, 5000)]:
        r = client.patch(
            f"/api/applications/{app_id}",
            json={"outcome": "Accepted", "tuitionCost": tuition, "financialAid": aid},
        )
        assert r.status_code == 200

    body = client.get("/api/view/compare", params={"ids": ["a1", "a2", "a3"]}).json()
    assert [s["application"]["id"] for s in body["schools"]] == ["a1", "a3"]
    assert [s["netCost"] for s in body["schools"]] == [22000, 40000]
    assert body["lowestCost"] == 22000
    assert body["mostAid"] == 60000
    assert [(s["lowestCost"], s["mostAid"]) for s in body["schools"]] == [
        (True, True),
        (False, False),
    ]

    empty = client.get("/api/view/compare").json()
    assert empty["schools"] == []
    assert [a["id"] for a in empty["available"]] == ["a1", "a3"]


def test_dashboard_excludes_withdrawn_from_submitted(client):
    client.patch("/api/applications/a2", json={"outcome": "Withdrawn"})
    dashboard = client.get("/api/view/dashboard", params={"today": "2025-01-01"}).json()
    assert dashboard["progress"]["submittedApplications"] == 1
    assert client.get("/api/view/progress").json()["submittedApplications"] == 2


def test_startup_applies_system_collation(db_path, monkeypatch):
    monkeypatch.setattr(settings, "data_dir", db_path.parent)
    calls = []
    monkeypatch.setattr(
        locale, "setlocale", lambda category, value=None: calls.append((category, value))
    )
    with TestClient(app):
        pass
    assert (locale.LC_COLLATE, "") in calls
