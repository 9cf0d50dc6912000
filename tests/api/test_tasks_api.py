"""
Name: Task Endpoint Tests

Responsibilities:
  - Validate task visibility through the HTTP layer
  - Cover routing to a lead, distribution to members and submissions
  - Ensure hidden tasks read as missing and denials map to 403
"""

import pytest


pytestmark = pytest.mark.api


@pytest.fixture()
def team(make_user, make_domain):
    make_domain("Mechanical", leads=["l1@example.com", "l2@example.com"], members=["u1@example.com"])
    make_domain("Electrical", leads=["e1@example.com"])
    return {
        "super": make_user("super@example.com", "super-admin"),
        "admin": make_user("admin@example.com", "admin"),
        "l1": make_user("l1@example.com", "domain-lead", ["Mechanical"]),
        "l2": make_user("l2@example.com", "domain-lead", ["Mechanical"]),
        "e1": make_user("e1@example.com", "domain-lead", ["Electrical"]),
        "u1": make_user("u1@example.com", "member", ["Mechanical"]),
        "u2": make_user("u2@example.com", "member", ["Mechanical"]),
    }


def _route_to_lead(client, headers, team) -> dict:
    response = client.post(
        "/v1/tasks",
        headers=headers(team["super"]),
        json={
            "title": "Align test rig",
            "domain": "Mechanical",
            "assigned_to_lead": {"id": team["l1"].id, "email": team["l1"].email},
        },
    )
    assert response.status_code == 201
    return response.json()


def test_requests_without_principal_are_rejected(client, team):
    assert client.get("/v1/tasks").status_code == 401
    assert client.get("/v1/tasks", headers={"X-User": "not json"}).status_code == 401
    assert client.get("/v1/tasks", headers={"X-User": '{"id": "nobody"}'}).status_code == 401


def test_task_routed_to_lead_is_hidden_from_other_leads(client, headers, team):
    task = _route_to_lead(client, headers, team)
    assert task["status"] == "Unassigned"
    assert task["created_by"]["email"] == "super@example.com"

    l1_view = client.get("/v1/tasks", headers=headers(team["l1"])).json()
    assert [t["id"] for t in l1_view["items"]] == [task["id"]]
    assert l1_view["items"][0]["can_manage"] is True

    assert client.get("/v1/tasks", headers=headers(team["l2"])).json()["count"] == 0
    assert client.get(f"/v1/tasks/{task['id']}", headers=headers(team["l2"])).status_code == 404
    assert client.get("/v1/tasks", headers=headers(team["e1"])).json()["count"] == 0


def test_distributing_task_makes_it_pending_and_visible(client, headers, team):
    task = _route_to_lead(client, headers, team)

    response = client.patch(
        f"/v1/tasks/{task['id']}",
        headers=headers(team["l1"]),
        json={"assignees": [{"id": team["u1"].id, "email": team["u1"].email}]},
    )
    assert response.status_code == 200
    assert response.json()["status"] == "Pending"

    assert client.get("/v1/tasks", headers=headers(team["l2"])).json()["count"] == 1
    member_view = client.get("/v1/tasks", headers=headers(team["u1"])).json()
    assert member_view["count"] == 1
    assert member_view["items"][0]["can_manage"] is False
    assert client.get("/v1/tasks", headers=headers(team["u2"])).json()["count"] == 0
    assert client.get(f"/v1/tasks/{task['id']}", headers=headers(team["u2"])).status_code == 404


def test_only_assignees_submit_work(client, headers, team):
    task = client.post(
        "/v1/tasks",
        headers=headers(team["l1"]),
        json={"title": "Draw bracket", "assignees": [{"id": team["u1"].id}]},
    ).json()
    assert task["domain"] == "Mechanical"
    assert task["status"] == "Pending"

    submitted = client.post(
        f"/v1/tasks/{task['id']}/submissions",
        headers=headers(team["u1"]),
        json={"file": "submissions/bracket.pdf"},
    )
    assert submitted.status_code == 200
    assert submitted.json()["submissions"][0]["file"] == "submissions/bracket.pdf"

    lead_submit = client.post(
        f"/v1/tasks/{task['id']}/submissions",
        headers=headers(team["l1"]),
        json={"file": "submissions/other.pdf"},
    )
    assert lead_submit.status_code == 403

    commented = client.post(
        f"/v1/tasks/{task['id']}/comments",
        headers=headers(team["u1"]),
        json={"text": "Done, please review"},
    )
    assert commented.status_code == 200
    assert commented.json()["comments"][0]["author"]["id"] == team["u1"].id


def test_task_creation_and_deletion_permissions(client, headers, team):
    denied = client.post(
        "/v1/tasks", headers=headers(team["admin"]), json={"title": "Admin task", "domain": "Mechanical"}
    )
    assert denied.status_code == 403

    foreign = client.post(
        "/v1/tasks", headers=headers(team["e1"]), json={"title": "Cross domain", "domain": "Mechanical"}
    )
    assert foreign.status_code == 403

    missing = client.post(
        "/v1/tasks", headers=headers(team["super"]), json={"title": "Nowhere", "domain": "Retired"}
    )
    assert missing.status_code == 400

    task = client.post(
        "/v1/tasks",
        headers=headers(team["l1"]),
        json={"title": "Keep", "domain": "Mechanical", "assignees": [{"id": team["u1"].id}]},
    ).json()
    assert client.delete(f"/v1/tasks/{task['id']}", headers=headers(team["u1"])).status_code == 403
    assert client.patch(f"/v1/tasks/{task['id']}", headers=headers(team["l1"]), json={}).status_code == 400
    assert client.delete(f"/v1/tasks/{task['id']}", headers=headers(team["admin"])).status_code == 204
    assert client.get("/v1/tasks", headers=headers(team["super"])).json()["count"] == 0


def test_domain_query_scopes_listing(client, headers, team):
    client.post("/v1/tasks", headers=headers(team["super"]), json={"title": "M", "domain": "Mechanical"})
    client.post("/v1/tasks", headers=headers(team["super"]), json={"title": "E", "domain": "Electrical"})

    everything = client.get("/v1/tasks", headers=headers(team["admin"])).json()
    scoped = client.get("/v1/tasks", params={"domain": "Electrical"}, headers=headers(team["admin"])).json()
    assert everything["count"] == 2
    assert [t["title"] for t in scoped["items"]] == ["E"]


def test_activity_is_logged_for_admins(client, headers, team):
    _route_to_lead(client, headers, team)

    logs = client.get("/v1/logs", headers=headers(team["admin"]))
    assert logs.status_code == 200
    entries = logs.json()["items"]
    assert any(e["category"] == "Task Management" and e["actor_email"] == "super@example.com" for e in entries)

    assert client.get("/v1/logs", headers=headers(team["u1"])).status_code == 403


def test_domain_lead_rates_submitted_work(client, headers, team):
    task = client.post(
        "/v1/tasks",
        headers=headers(team["l1"]),
        json={"title": "Machine shaft", "assignees": [{"id": team["u1"].id}]},
    ).json()
    submitted = client.post(
        f"/v1/tasks/{task['id']}/submissions",
        headers=headers(team["u1"]),
        json={"file": "submissions/shaft.step"},
    ).json()
    submission_id = submitted["submissions"][0]["id"]
    url = f"/v1/tasks/{task['id']}/submissions/{submission_id}"

    rated = client.patch(url, headers=headers(team["l1"]), json={"quality_score": 4, "remarks": "Tidy tolerances"})
    assert rated.status_code == 200
    submission = rated.json()["submissions"][0]
    assert submission["quality_score"] == 4
    assert submission["remarks"] == "Tidy tolerances"
    assert submission["file"] == "submissions/shaft.step"

    assert client.patch(url, headers=headers(team["u1"]), json={"quality_score": 5}).status_code == 403
    assert client.patch(url, headers=headers(team["e1"]), json={"quality_score": 5}).status_code == 404
    assert client.patch(url, headers=headers(team["l1"]), json={"quality_score": 9}).status_code == 422
    assert client.patch(url, headers=headers(team["l1"]), json={}).status_code == 400
    missing = client.patch(
        f"/v1/tasks/{task['id']}/submissions/unknown", headers=headers(team["l1"]), json={"remarks": "?"}
    )
    assert missing.status_code == 404
