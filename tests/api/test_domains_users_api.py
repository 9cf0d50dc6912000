"""
Name: Domain and User Administration Endpoint Tests

Responsibilities:
  - Validate domain lifecycle and membership management
  - Validate user administration and profile updates
  - Ensure role permissions gate administrative routes
"""

import json

import pytest


pytestmark = pytest.mark.api


@pytest.fixture()
def team(make_user, make_domain):
    make_domain("Mechanical", leads=["l1@example.com"], members=["u1@example.com"])
    make_domain("Electrical")
    return {
        "super": make_user("super@example.com", "super-admin"),
        "admin": make_user("admin@example.com", "admin"),
        "l1": make_user("l1@example.com", "domain-lead", ["Mechanical"]),
        "u1": make_user("u1@example.com", "member", ["Mechanical"]),
    }


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_domain_creation_is_super_admin_only(client, headers, team):
    created = client.post("/v1/domains", headers=headers(team["super"]), json={"name": "Ops"})
    assert created.status_code == 201
    assert created.json() == {"name": "Ops", "leads": [], "members": []}

    assert client.post("/v1/domains", headers=headers(team["super"]), json={"name": "Ops"}).status_code == 409
    assert client.post("/v1/domains", headers=headers(team["admin"]), json={"name": "QA"}).status_code == 403

    for reserved in ("all", "Ops-lead", "domain-Ops", "role-x"):
        response = client.post("/v1/domains", headers=headers(team["super"]), json={"name": reserved})
        assert response.status_code == 400, reserved

    names = [d["name"] for d in client.get("/v1/domains", headers=headers(team["u1"])).json()["items"]]
    assert names == ["Electrical", "Mechanical", "Ops"]


def test_membership_changes_reject_duplicates(client, headers, team):
    added = client.post(
        "/v1/domains/Electrical/members", headers=headers(team["admin"]), json={"email": "New@Example.com"}
    )
    assert added.status_code == 200
    assert added.json()["members"] == ["new@example.com"]

    again = client.post(
        "/v1/domains/Electrical/members", headers=headers(team["admin"]), json={"email": "new@example.com"}
    )
    assert again.status_code == 409
    lead_again = client.post(
        "/v1/domains/Electrical/leads", headers=headers(team["admin"]), json={"email": "lead@example.com"}
    )
    assert lead_again.status_code == 200
    assert (
        client.post(
            "/v1/domains/Electrical/leads", headers=headers(team["admin"]), json={"email": "Lead@example.com"}
        ).status_code
        == 409
    )

    assert (
        client.post(
            "/v1/domains/Electrical/leads", headers=headers(team["l1"]), json={"email": "x@example.com"}
        ).status_code
        == 403
    )
    assert (
        client.post(
            "/v1/domains/Missing/leads", headers=headers(team["admin"]), json={"email": "x@example.com"}
        ).status_code
        == 404
    )

    removed = client.delete("/v1/domains/Electrical/members/new@example.com", headers=headers(team["admin"]))
    assert removed.status_code == 200
    assert removed.json()["members"] == []
    gone = client.delete("/v1/domains/Electrical/members/new@example.com", headers=headers(team["admin"]))
    assert gone.status_code == 404


def test_deleting_domain_removes_its_tasks(client, headers, team):
    client.post("/v1/tasks", headers=headers(team["super"]), json={"title": "A", "domain": "Mechanical"})
    client.post("/v1/tasks", headers=headers(team["super"]), json={"title": "B", "domain": "Mechanical"})
    client.post("/v1/tasks", headers=headers(team["super"]), json={"title": "C", "domain": "Electrical"})

    response = client.delete("/v1/domains/Mechanical", headers=headers(team["super"]))
    assert response.status_code == 200
    assert response.json() == {"name": "Mechanical", "deleted_tasks": 2}

    remaining = client.get("/v1/tasks", headers=headers(team["super"])).json()["items"]
    assert [t["title"] for t in remaining] == ["C"]
    assert client.delete("/v1/domains/Mechanical", headers=headers(team["super"])).status_code == 404


def test_me_reflects_stored_record_not_header_claims(client, team):
    header = {"X-User": json.dumps({"id": team["u1"].id, "email": "super@example.com"})}
    me = client.get("/v1/users/me", headers=header)
    assert me.status_code == 200
    assert me.json()["email"] == "u1@example.com"
    assert me.json()["role"] == "member"
    assert me.json()["domains"] == ["Mechanical"]


def test_profile_active_domain_must_be_own_domain(client, headers, team):
    ok = client.patch("/v1/users/me", headers=headers(team["u1"]), json={"active_domain": "Mechanical"})
    assert ok.status_code == 200
    assert ok.json()["active_domain"] == "Mechanical"

    assert (
        client.patch("/v1/users/me", headers=headers(team["u1"]), json={"active_domain": "Electrical"}).status_code
        == 400
    )
    assert (
        client.patch("/v1/users/me", headers=headers(team["u1"]), json={"active_domain": "Nowhere"}).status_code
        == 400
    )
    cleared = client.patch("/v1/users/me", headers=headers(team["u1"]), json={"active_domain": ""})
    assert cleared.json()["active_domain"] is None

    admin = client.patch("/v1/users/me", headers=headers(team["admin"]), json={"active_domain": "Electrical"})
    assert admin.status_code == 200


def test_user_administration(client, headers, team):
    assert client.get("/v1/users", headers=headers(team["u1"])).status_code == 403
    assert client.get("/v1/users", headers=headers(team["l1"])).json()["count"] == 4

    created = client.post(
        "/v1/users",
        headers=headers(team["super"]),
        json={"email": "New.Hire@Example.com", "role": "member", "domains": ["Electrical"]},
    )
    assert created.status_code == 201
    assert created.json()["email"] == "new.hire@example.com"
    assert created.json()["domains"] == ["Electrical"]

    duplicate = client.post("/v1/users", headers=headers(team["super"]), json={"email": "new.hire@example.com"})
    assert duplicate.status_code == 409
    assert client.post("/v1/users", headers=headers(team["admin"]), json={"email": "x@example.com"}).status_code == 403

    promoted = client.patch(
        f"/v1/users/{team['u1'].id}/role", headers=headers(team["super"]), json={"role": "domain-lead"}
    )
    assert promoted.status_code == 200
    assert promoted.json()["role"] == "domain-lead"

    bad_role = client.patch(f"/v1/users/{team['u1'].id}/role", headers=headers(team["super"]), json={"role": "owner"})
    assert bad_role.status_code == 422
    demote_self = client.patch(
        f"/v1/users/{team['super'].id}/role", headers=headers(team["super"]), json={"role": "member"}
    )
    assert demote_self.status_code == 403


def test_member_can_be_promoted_to_lead(client, headers, team):
    promoted = client.post(
        "/v1/domains/Mechanical/leads", headers=headers(team["super"]), json={"email": "u1@example.com"}
    )
    assert promoted.status_code == 200
    body = promoted.json()
    assert body["leads"] == ["l1@example.com", "u1@example.com"]
    assert body["members"] == ["u1@example.com"]

