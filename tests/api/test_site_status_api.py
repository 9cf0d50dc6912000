"""
Name: Site Status Endpoint Tests

Responsibilities:
  - Validate maintenance and emergency toggles and the ETA rules
  - Ensure non-admins are turned away with 503 while the site is locked
  - Ensure admins keep working and everyone can still read the status
"""

import pytest


pytestmark = pytest.mark.api


@pytest.fixture()
def people(make_user, make_domain):
    make_domain("Mechanical", leads=["l1@example.com"], members=["u1@example.com"])
    return {
        "super": make_user("super@example.com", "super-admin"),
        "admin": make_user("admin@example.com", "admin"),
        "l1": make_user("l1@example.com", "domain-lead", ["Mechanical"]),
        "u1": make_user("u1@example.com", "member", ["Mechanical"]),
    }


def test_site_is_open_until_a_flag_is_set(client, headers, people):
    status = client.get("/v1/site-status", headers=headers(people["u1"]))
    assert status.status_code == 200
    assert status.json()["locked"] is False
    assert client.get("/v1/tasks", headers=headers(people["u1"])).status_code == 200


def test_maintenance_locks_out_non_admins(client, headers, people):
    response = client.put(
        "/v1/site-status",
        headers=headers(people["admin"]),
        json={"maintenance_mode": True, "maintenance_eta": "18:00 UTC"},
    )
    assert response.status_code == 200
    assert response.json()["maintenance_eta"] == "18:00 UTC"
    assert response.json()["updated_by"]["email"] == "admin@example.com"

    for user in ("u1", "l1"):
        blocked = client.get("/v1/tasks", headers=headers(people[user]))
        assert blocked.status_code == 503
        assert "18:00 UTC" in blocked.json()["detail"]
    assert client.get("/v1/tasks", headers=headers(people["admin"])).status_code == 200
    assert client.get("/v1/users", headers=headers(people["super"])).status_code == 200

    status = client.get("/v1/site-status", headers=headers(people["u1"])).json()
    assert status["maintenance_mode"] is True
    assert status["locked"] is True

    reopened = client.put("/v1/site-status", headers=headers(people["admin"]), json={"maintenance_mode": False})
    assert reopened.json()["maintenance_eta"] is None
    assert client.get("/v1/tasks", headers=headers(people["u1"])).status_code == 200

    logs = client.get("/v1/logs?category=Site%20Status", headers=headers(people["super"])).json()
    assert logs["count"] == 2


def test_emergency_shutdown_locks_out_non_admins(client, headers, people):
    response = client.put("/v1/site-status", headers=headers(people["super"]), json={"emergency_shutdown": True})
    assert response.status_code == 200

    blocked = client.get("/v1/announcements", headers=headers(people["u1"]))
    assert blocked.status_code == 503
    assert blocked.json()["detail"].startswith("Emergency Shutdown")
    assert client.get("/v1/announcements", headers=headers(people["admin"])).status_code == 200


def test_site_status_changes_are_restricted(client, headers, people):
    for user, flag in (("l1", "maintenance_mode"), ("u1", "emergency_shutdown")):
        denied = client.put("/v1/site-status", headers=headers(people[user]), json={flag: True})
        assert denied.status_code == 403

    eta_only = client.put("/v1/site-status", headers=headers(people["admin"]), json={"maintenance_eta": "soon"})
    assert eta_only.status_code == 400
    assert client.put("/v1/site-status", headers=headers(people["admin"]), json={}).status_code == 400
    assert client.get("/v1/site-status", headers=headers(people["u1"])).json()["locked"] is False
