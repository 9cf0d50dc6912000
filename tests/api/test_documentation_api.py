"""
Name: Documentation Library Endpoint Tests

Responsibilities:
  - Validate per-item visibility of folders and files
  - Ensure only documentation curators and super-admins manage the library
  - Validate recursive folder deletion and breadcrumb paths
"""

import pytest


pytestmark = pytest.mark.api


@pytest.fixture()
def team(make_user, make_domain):
    make_domain("Documentation", leads=["docs@example.com"])
    make_domain("Mechanical", leads=["l1@example.com"], members=["u1@example.com"])
    return {
        "super": make_user("super@example.com", "super-admin"),
        "admin": make_user("admin@example.com", "admin"),
        "docs": make_user("docs@example.com", "domain-lead", ["Documentation"]),
        "l1": make_user("l1@example.com", "domain-lead", ["Mechanical"]),
        "u1": make_user("u1@example.com", "member", ["Mechanical"]),
        "u2": make_user("u2@example.com", "member"),
    }


def _create(client, headers, user, **body) -> dict:
    response = client.post("/v1/documentation", headers=headers(user), json=body)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture()
def library(client, headers, team):
    root = _create(client, headers, team["docs"], type="folder", name="Handbooks", viewable_by=["all"])
    manual = _create(
        client,
        headers,
        team["docs"],
        type="file",
        name="Rig manual.pdf",
        parent_id=root["id"],
        viewable_by=["Mechanical-member"],
        file_path="docs/rig-manual.pdf",
        mime_type="application/pdf",
    )
    nested = _create(
        client, headers, team["docs"], type="folder", name="Archive", parent_id=root["id"], viewable_by=["role-admin"]
    )
    old = _create(
        client,
        headers,
        team["docs"],
        type="file",
        name="Old.pdf",
        parent_id=nested["id"],
        viewable_by=["role-admin"],
        file_path="docs/old.pdf",
    )
    return {"root": root, "manual": manual, "nested": nested, "old": old}


def _names(client, headers, user) -> list[str]:
    return [i["name"] for i in client.get("/v1/documentation", headers=headers(user)).json()["items"]]


def test_items_are_visible_per_selector(client, headers, team, library):
    assert _names(client, headers, team["u1"]) == ["Handbooks", "Rig manual.pdf"]
    assert _names(client, headers, team["u2"]) == ["Handbooks"]
    assert _names(client, headers, team["admin"]) == ["Archive", "Handbooks", "Old.pdf"]
    assert len(_names(client, headers, team["super"])) == 4


def test_only_curators_manage_the_library(client, headers, team, library):
    listing = client.get("/v1/documentation", headers=headers(team["admin"])).json()
    assert listing["can_manage"] is False
    assert client.get("/v1/documentation", headers=headers(team["docs"])).json()["can_manage"] is True

    for user in ("admin", "l1", "u1"):
        response = client.post(
            "/v1/documentation",
            headers=headers(team[user]),
            json={"type": "folder", "name": "Mine", "viewable_by": ["all"]},
        )
        assert response.status_code == 403

    renamed = client.put(
        f"/v1/documentation/{library['manual']['id']}",
        headers=headers(team["super"]),
        json={"name": "Rig manual v2.pdf", "viewable_by": ["domain-Mechanical"]},
    )
    assert renamed.status_code == 200
    assert renamed.json()["viewable_by"] == ["domain-Mechanical"]


def test_create_validation(client, headers, team, library):
    no_path = client.post(
        "/v1/documentation",
        headers=headers(team["docs"]),
        json={"type": "file", "name": "Loose.pdf", "viewable_by": ["all"]},
    )
    assert no_path.status_code == 422

    bad_selector = client.post(
        "/v1/documentation",
        headers=headers(team["docs"]),
        json={"type": "folder", "name": "Legacy", "viewable_by": ["member"]},
    )
    assert bad_selector.status_code == 422

    under_file = client.post(
        "/v1/documentation",
        headers=headers(team["docs"]),
        json={"type": "folder", "name": "Inside", "parent_id": library["manual"]["id"], "viewable_by": ["all"]},
    )
    assert under_file.status_code == 400

    orphan = client.post(
        "/v1/documentation",
        headers=headers(team["docs"]),
        json={"type": "folder", "name": "Orphan", "parent_id": "missing", "viewable_by": ["all"]},
    )
    assert orphan.status_code == 404


def test_empty_viewable_by_hides_item_from_everyone_but_super_admin(client, headers, team):
    _create(client, headers, team["docs"], type="folder", name="Private")
    assert _names(client, headers, team["docs"]) == []
    assert _names(client, headers, team["admin"]) == []
    assert _names(client, headers, team["super"]) == ["Private"]


def test_path_lists_visible_ancestors(client, headers, team, library):
    trail = client.get(f"/v1/documentation/{library['manual']['id']}/path", headers=headers(team["u1"]))
    assert trail.status_code == 200
    assert [i["name"] for i in trail.json()["items"]] == ["Handbooks", "Rig manual.pdf"]

    hidden = client.get(f"/v1/documentation/{library['old']['id']}/path", headers=headers(team["u1"]))
    assert hidden.status_code == 404


def test_deleting_folder_removes_subtree(client, headers, team, library):
    response = client.delete(f"/v1/documentation/{library['root']['id']}", headers=headers(team["docs"]))
    assert response.status_code == 200
    body = response.json()
    assert body["deleted_ids"][0] == library["root"]["id"]
    assert set(body["deleted_ids"]) == {item["id"] for item in library.values()}
    assert sorted(body["deleted_files"]) == ["docs/old.pdf", "docs/rig-manual.pdf"]

    assert _names(client, headers, team["super"]) == []
    assert client.delete(f"/v1/documentation/{library['root']['id']}", headers=headers(team["docs"])).status_code == 404


def test_hidden_items_read_as_missing_for_changes(client, headers, team):
    private = _create(client, headers, team["docs"], type="folder", name="Private")
    visible = _create(client, headers, team["docs"], type="folder", name="Public", viewable_by=["all"])

    assert client.get(f"/v1/documentation/{private['id']}/path", headers=headers(team["u1"])).status_code == 404
    assert (
        client.put(
            f"/v1/documentation/{private['id']}", headers=headers(team["u1"]), json={"name": "Mine"}
        ).status_code
        == 404
    )
    assert client.delete(f"/v1/documentation/{private['id']}", headers=headers(team["u1"])).status_code == 404

    assert client.delete(f"/v1/documentation/{visible['id']}", headers=headers(team["u1"])).status_code == 403
    renamed = client.put(
        f"/v1/documentation/{private['id']}", headers=headers(team["docs"]), json={"name": "Private v2"}
    )
    assert renamed.status_code == 200
