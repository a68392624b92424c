"""HTTP surface: albums, members, invites and join requests end to end."""

import pytest
from sqlmodel import Session

from conftest import OWNER, database_locked


@pytest.fixture
def album_id(client, auth):
    r = client.post("/api/v1/albums", json={"title": "Beach Week"}, headers=auth(OWNER))
    assert r.status_code == 201, r.text
    return r.json()["id"]


def _invite(client, auth, album_id, **body):
    r = client.post(f"/api/v1/albums/{album_id}/invites", json=body, headers=auth(OWNER))
    assert r.status_code == 201, r.text
    return r.json()


def test_health(client):
    assert client.get("/api/v1/health").json() == {"status": "ok"}


def test_requires_token(client):
    r = client.get("/api/v1/albums")
    assert r.status_code in (401, 403)

    r = client.get("/api/v1/albums", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_create_and_list_albums(client, auth, album_id):
    r = client.get("/api/v1/albums", headers=auth(OWNER))
    assert r.status_code == 200
    albums = r.json()
    assert len(albums) == 1
    assert albums[0]["id"] == album_id
    assert albums[0]["role"] == "owner"
    assert albums[0]["member_count"] == 1
    assert albums[0]["privacy_mode"] == "invite_only"


def test_non_member_cannot_read_album(client, auth, album_id):
    r = client.get(f"/api/v1/albums/{album_id}", headers=auth("usr_stranger"))
    assert r.status_code == 403
    assert r.json()["error"] == "forbidden"

    r = client.get("/api/v1/albums/alb_missing", headers=auth(OWNER))
    assert r.status_code == 404


def test_direct_invite_scenario(client, auth, album_id):
    invite = _invite(client, auth, album_id, default_role="contributor")
    assert invite["invite_url"].endswith(f"/invite/{invite['invite_token']}")
    assert invite["deep_link_url"] == f"capsule://invite/{invite['invite_token']}"
    assert invite["expires_at"] is None

    r = client.post(f"/api/v1/invites/{invite['invite_token']}/accept", headers=auth("usr_u2"))
    assert r.status_code == 200
    assert r.json() == {"outcome": "joined", "album_id": album_id, "join_request": None}

    r = client.post(f"/api/v1/invites/{invite['invite_token']}/accept", headers=auth("usr_u2"))
    assert r.json()["outcome"] == "already_member"

    r = client.get(f"/api/v1/albums/{album_id}/access/upload", headers=auth("usr_u2"))
    assert r.json()["allowed"] is True
    r = client.get(f"/api/v1/albums/{album_id}/access/manage_members", headers=auth("usr_u2"))
    assert r.json()["allowed"] is False

    r = client.get(f"/api/v1/albums/{album_id}/members", headers=auth("usr_u2"))
    assert [(m["user_id"], m["role"]) for m in r.json()] == [
        (OWNER, "owner"),
        ("usr_u2", "contributor"),
    ]


def test_unknown_capability_rejected(client, auth, album_id):
    r = client.get(f"/api/v1/albums/{album_id}/access/teleport", headers=auth(OWNER))
    assert r.status_code == 422


def test_invite_cannot_grant_co_manager(client, auth, album_id):
    r = client.post(
        f"/api/v1/albums/{album_id}/invites",
        json={"default_role": "co_manager"},
        headers=auth(OWNER),
    )
    assert r.status_code == 422
    assert r.json()["error"] == "invalid_role"


def test_accept_unknown_invite(client, auth):
    r = client.post("/api/v1/invites/nope/accept", headers=auth("usr_u2"))
    assert r.status_code == 404


def test_preview_without_signing_in(client, auth, album_id):
    invite = _invite(client, auth, album_id, requires_approval=True, expires_in=3600)

    r = client.get(f"/api/v1/invites/{invite['invite_token']}")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "valid"
    assert body["album_title"] == "Beach Week"
    assert body["requires_approval"] is True
    assert body["expires_at"] is not None

    r = client.get(f"/api/v1/invites/{invite['invite_token']}", headers=auth(OWNER))
    assert r.json()["status"] == "already_member"

    assert client.get("/api/v1/invites/missing").json()["status"] == "not_found"


def test_approval_scenario(client, auth, album_id):
    invite = _invite(client, auth, album_id, requires_approval=True)

    r = client.post(f"/api/v1/invites/{invite['invite_token']}/accept", headers=auth("usr_u3"))
    body = r.json()
    assert body["outcome"] == "pending_approval"
    request_id = body["join_request"]["id"]

    r = client.get(f"/api/v1/albums/{album_id}/members/me", headers=auth("usr_u3"))
    assert r.status_code == 404

    r = client.get(f"/api/v1/albums/{album_id}/join-requests", headers=auth("usr_u3"))
    assert r.status_code == 403

    r = client.get(f"/api/v1/albums/{album_id}/join-requests", headers=auth(OWNER))
    assert [jr["id"] for jr in r.json()] == [request_id]

    r = client.post(
        f"/api/v1/join-requests/{request_id}/resolve",
        json={"approve": True, "role": "viewer"},
        headers=auth(OWNER),
    )
    assert r.status_code == 200
    assert r.json()["status"] == "approved"
    assert r.json()["reviewed_by"] == OWNER

    r = client.get(f"/api/v1/albums/{album_id}/members/me", headers=auth("usr_u3"))
    assert r.json()["role"] == "viewer"
    assert r.json()["role_display_name"] == "Viewer"
    assert r.json()["role_description"] == "Can only view and download photos"

    r = client.post(
        f"/api/v1/join-requests/{request_id}/resolve",
        json={"approve": False},
        headers=auth(OWNER),
    )
    assert r.status_code == 409
    assert r.json()["error"] == "already_resolved"


def test_member_management(client, auth, album_id):
    invite = _invite(client, auth, album_id, default_role="viewer")
    for user_id in ("usr_co", "usr_v"):
        client.post(f"/api/v1/invites/{invite['invite_token']}/accept", headers=auth(user_id))

    r = client.patch(
        f"/api/v1/albums/{album_id}/members/usr_co",
        json={"role": "co_manager"},
        headers=auth("usr_v"),
    )
    assert r.status_code == 403

    r = client.patch(
        f"/api/v1/albums/{album_id}/members/usr_co",
        json={"role": "co_manager"},
        headers=auth(OWNER),
    )
    assert r.status_code == 200
    assert r.json()["role"] == "co_manager"

    r = client.patch(
        f"/api/v1/albums/{album_id}/members/{OWNER}",
        json={"role": "viewer"},
        headers=auth("usr_co"),
    )
    assert r.status_code == 409
    assert r.json()["error"] == "invalid_transition"

    r = client.patch(
        f"/api/v1/albums/{album_id}/members/me/notifications",
        json={"notification_preference": "digest"},
        headers=auth("usr_v"),
    )
    assert r.json()["notification_preference"] == "digest"

    r = client.delete(f"/api/v1/albums/{album_id}/members/{OWNER}", headers=auth("usr_co"))
    assert r.status_code == 409
    assert r.json()["error"] == "cannot_remove_owner"

    r = client.delete(f"/api/v1/albums/{album_id}/members/usr_v", headers=auth("usr_co"))
    assert r.status_code == 204

    r = client.delete(f"/api/v1/albums/{album_id}/members/me", headers=auth("usr_co"))
    assert r.status_code == 204

    r = client.get(f"/api/v1/albums/{album_id}/members", headers=auth(OWNER))
    assert [m["user_id"] for m in r.json()] == [OWNER]


def test_invite_listing_and_revocation(client, auth, album_id):
    invite = _invite(client, auth, album_id)

    r = client.get(f"/api/v1/albums/{album_id}/invites", headers=auth("usr_stranger"))
    assert r.status_code == 403

    r = client.get(f"/api/v1/albums/{album_id}/invites", headers=auth(OWNER))
    assert [i["id"] for i in r.json()] == [invite["id"]]

    assert client.delete(f"/api/v1/invites/{invite['id']}", headers=auth(OWNER)).status_code == 204
    assert client.delete(f"/api/v1/invites/{invite['id']}", headers=auth(OWNER)).status_code == 204

    r = client.post(f"/api/v1/invites/{invite['invite_token']}/accept", headers=auth("usr_u2"))
    assert r.status_code == 404


def test_album_update_and_delete(client, auth, album_id):
    r = client.patch(
        f"/api/v1/albums/{album_id}",
        json={"title": "Beach Week 2026", "privacy_mode": "public_unlisted"},
        headers=auth(OWNER),
    )
    assert r.status_code == 200
    assert r.json()["title"] == "Beach Week 2026"
    assert r.json()["privacy_mode"] == "public_unlisted"

    r = client.delete(f"/api/v1/albums/{album_id}", headers=auth("usr_stranger"))
    assert r.status_code == 403

    assert client.delete(f"/api/v1/albums/{album_id}", headers=auth(OWNER)).status_code == 204
    assert client.get("/api/v1/albums", headers=auth(OWNER)).json() == []


def test_store_outage_is_503(client, auth, album_id, monkeypatch):
    monkeypatch.setattr(Session, "exec", database_locked)

    # Raised straight from the ORM
    r = client.get("/api/v1/albums", headers=auth(OWNER))
    assert r.status_code == 503
    body = r.json()
    assert body["error"] == "store_unavailable"
    assert body["details"]["operation"] == "/api/v1/albums"

    # Translated by a store operation
    r = client.get(f"/api/v1/albums/{album_id}/members", headers=auth(OWNER))
    assert r.status_code == 503
    assert r.json()["error"] == "store_unavailable"
    assert r.json()["details"]["operation"] == "get_role"

    monkeypatch.undo()
    assert client.get("/api/v1/albums", headers=auth(OWNER)).status_code == 200
