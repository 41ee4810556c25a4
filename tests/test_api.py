import uuid

import pytest

from teamtemp.core.config import settings

API = "/api/v1"


@pytest.fixture
def admin(client):
    res = client.post(f"{API}/teams", json={"name": "Api Team", "admin_email": "api@example.com"})
    assert res.status_code == 201
    body = res.json()
    return {"slug": body["slug"], "headers": {"Authorization": f"Bearer {body['admin_token']}"}}


def _open_round(client, admin):
    res = client.post(f"{API}/admin/rounds", headers=admin["headers"])
    assert res.status_code == 201
    return res.json()


def _respond(client, token, value, free_text=None):
    page = client.get(f"{API}/rounds/{token}").json()
    answers = [{"round_question_id": q["id"], "value": value} for q in page["questions"]]
    return client.post(f"{API}/rounds/{token}/responses", json={"answers": answers, "free_text": free_text})


def test_healthz(client):
    res = client.get(f"{API}/healthz")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_create_team(client):
    res = client.post(f"{API}/teams", json={"name": "New Squad"})
    assert res.status_code == 201
    body = res.json()
    assert body["slug"] == "new-squad"
    assert body["admin_link"] == f"/admin/{body['admin_token']}"


def test_create_team_validation(client):
    assert client.post(f"{API}/teams", json={"name": ""}).status_code == 422
    assert client.post(f"{API}/teams", json={"name": "   "}).status_code == 422


def test_recover_always_ok(client, admin):
    for email in ("api@example.com", "unknown@example.com"):
        res = client.post(f"{API}/teams/recover", json={"email": email})
        assert res.status_code == 200
        assert res.json() == {"ok": True}


def test_admin_requires_token(client, admin):
    assert client.get(f"{API}/admin/load").status_code == 401
    res = client.get(f"{API}/admin/load", headers={"Authorization": "Bearer nope"})
    assert res.status_code == 403
    assert res.json() == {"detail": "Invalid admin token"}


def test_admin_load(client, admin):
    res = client.get(f"{API}/admin/load", headers=admin["headers"])
    assert res.status_code == 200
    body = res.json()
    assert body["team"]["slug"] == admin["slug"]
    assert len(body["fixed_items"]) == 4
    assert len(body["rotating_items"]) == 6


def test_settings_roundtrip(client, admin):
    res = client.put(f"{API}/admin/settings", json={"scale_max": 5, "allow_free_text": False}, headers=admin["headers"])
    assert res.status_code == 200
    assert res.json()["scale_max"] == 5

    body = client.get(f"{API}/admin/settings", headers=admin["headers"]).json()
    assert body == {"cadence": "biweekly", "scale_max": 5, "min_responses_to_show": 4, "allow_free_text": False}

    res = client.put(f"{API}/admin/settings", json={"scale_max": 9}, headers=admin["headers"])
    assert res.status_code == 422


def test_question_management(client, admin):
    headers = admin["headers"]
    res = client.post(f"{API}/admin/questions", json={"text": "Standups are useful.", "kind": "rotating_pool"}, headers=headers)
    assert res.status_code == 201
    question_id = res.json()["id"]

    load = client.get(f"{API}/admin/load", headers=headers).json()
    item = next(i for i in load["rotating_items"] if i["question_id"] == question_id)

    res = client.patch(f"{API}/admin/questions/items/{item['id']}", json={"kind": "fixed"}, headers=headers)
    assert res.status_code == 200
    assert res.json()["kind"] == "fixed"

    res = client.request("DELETE", f"{API}/admin/questions", json={"item_id": item["id"], "question_id": question_id}, headers=headers)
    assert res.status_code == 200
    load = client.get(f"{API}/admin/load", headers=headers).json()
    assert question_id not in {i["question_id"] for i in load["fixed_items"] + load["rotating_items"]}

    res = client.request("DELETE", f"{API}/admin/questions", json={}, headers=headers)
    assert res.status_code == 422


def test_question_category_too_long(client, admin):
    res = client.post(f"{API}/admin/questions", json={"text": "Long label.", "category": "c" * 41}, headers=admin["headers"])
    assert res.status_code == 422

    res = client.post(f"{API}/admin/questions", json={"text": "Long label.", "category": "c" * 40}, headers=admin["headers"])
    assert res.status_code == 201


def test_respond_flow(client, admin):
    round_ = _open_round(client, admin)

    page = client.get(f"{API}/rounds/{round_['token']}").json()
    assert page["round"]["status"] == "open"
    assert page["settings"]["scale_max"] == 3
    assert page["settings"]["scale_labels"] == ["Disagree", "Partly", "Agree"]
    assert len(page["questions"]) == 5

    res = _respond(client, round_["token"], 2, "All good")
    assert res.status_code == 201
    assert res.json() == {"ok": True, "response_count": 1}

    res = _respond(client, round_["token"], 4)
    assert res.status_code == 422


def test_respond_page_uses_round_scale(client, admin):
    round_ = _open_round(client, admin)
    client.put(f"{API}/admin/settings", json={"scale_max": 5}, headers=admin["headers"])

    page = client.get(f"{API}/rounds/{round_['token']}").json()
    assert page["settings"]["scale_max"] == 3


def test_unknown_round_token(client):
    res = client.get(f"{API}/rounds/missing")
    assert res.status_code == 404
    assert res.json() == {"detail": "Round not found"}


def test_close_round_and_closed_page(client, admin):
    round_ = _open_round(client, admin)
    url = f"{API}/admin/rounds/{round_['id']}/close"

    res = client.post(url, headers=admin["headers"])
    assert res.status_code == 200
    assert res.json()["status"] == "closed"
    assert client.post(url, headers=admin["headers"]).status_code == 409

    page = client.get(f"{API}/rounds/{round_['token']}").json()
    assert page["round"]["status"] == "closed"
    assert page["questions"] == []

    answers = [{"round_question_id": str(uuid.uuid4()), "value": 2}]
    res = client.post(f"{API}/rounds/{round_['token']}/responses", json={"answers": answers})
    assert res.status_code == 409


def test_close_round_of_other_team(client, admin):
    round_ = _open_round(client, admin)
    other = client.post(f"{API}/teams", json={"name": "Other"}).json()
    res = client.post(
        f"{API}/admin/rounds/{round_['id']}/close",
        headers={"Authorization": f"Bearer {other['admin_token']}"},
    )
    assert res.status_code == 404


def test_dashboard_retro_and_reports(client, admin):
    headers = admin["headers"]
    round_ = _open_round(client, admin)
    for i, value in enumerate([1, 3, 3, 3]):
        assert _respond(client, round_["token"], value, f"comment {i}").status_code == 201
    client.post(f"{API}/admin/rounds/{round_['id']}/close", headers=headers)

    dash = client.get(f"{API}/teams/{admin['slug']}/dashboard").json()
    assert dash["has_enough_data"] is True
    assert dash["last_round_id"] == round_["id"]
    assert len(dash["question_cards"]) == 5

    retro = client.get(f"{API}/teams/{admin['slug']}/retro/{round_['id']}").json()
    assert retro["enough_responses"] is True
    assert retro["response_count"] == 4
    assert len(retro["free_texts"]) == 4

    comments = client.get(f"{API}/admin/comments", headers=headers).json()
    assert len(comments) == 4

    analytics = client.get(f"{API}/admin/analytics", headers=headers).json()
    assert analytics["questions"][0]["rounds"][0]["avg"] == 2.5


def test_dashboard_unknown_team(client):
    assert client.get(f"{API}/teams/nobody/dashboard").status_code == 404


def test_super_teams(client, admin, monkeypatch):
    monkeypatch.setattr(settings, "SUPER_ADMIN_TOKEN", "super-secret")

    assert client.get(f"{API}/super/teams").status_code == 401
    assert client.get(f"{API}/super/teams", headers={"Authorization": "Bearer wrong"}).status_code == 403

    res = client.get(f"{API}/super/teams", headers={"Authorization": "Bearer super-secret"})
    assert res.status_code == 200
    assert [t["slug"] for t in res.json()] == [admin["slug"]]


def test_super_disabled_without_token(client, monkeypatch):
    monkeypatch.setattr(settings, "SUPER_ADMIN_TOKEN", "")
    res = client.get(f"{API}/super/teams", headers={"Authorization": "Bearer anything"})
    assert res.status_code == 403
