import uuid
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from clubhub.models.gallery import Gallery, GalleryPhoto
from clubhub.models.user import User, UserRole
from tests.helpers import member_data, register_and_login


@pytest.fixture
def superadmin_headers(client: TestClient, db_session) -> dict[str, str]:
    token = register_and_login(client, member_data(42))
    user = db_session.execute(select(User).where(User.email == "member42@example.com")).scalar_one()
    user.role = UserRole.SUPERADMIN
    db_session.commit()
    return {"Authorization": f"Bearer {token}"}


def test_admin_routes_require_admin(client: TestClient, authenticated_client: TestClient):
    assert authenticated_client.get("/admin/users").status_code == 403
    authenticated_client.headers.clear()
    assert client.get("/admin/stats").status_code == 401


def test_list_users(client: TestClient, admin_headers, test_user_data):
    client.post("/auth/register", json=test_user_data)

    resp = client.get("/admin/users", headers=admin_headers)

    assert resp.status_code == 200
    assert resp.json()["count"] == 2
    assert {u["email"] for u in resp.json()["users"]} == {"chief@example.com", "asha@example.com"}


def test_update_role_requires_superadmin(client: TestClient, admin_headers, test_user_data):
    user_id = client.post("/auth/register", json=test_user_data).json()["user"]["id"]
    resp = client.put(f"/admin/users/{user_id}/role", json={"role": "admin"}, headers=admin_headers)
    assert resp.status_code == 403


def test_update_role(client: TestClient, superadmin_headers, test_user_data):
    user_id = client.post("/auth/register", json=test_user_data).json()["user"]["id"]

    resp = client.put(f"/admin/users/{user_id}/role", json={"role": "admin"}, headers=superadmin_headers)

    assert resp.status_code == 200
    assert resp.json()["role"] == "admin"
    assert resp.json()["is_admin"] is True


def test_update_role_invalid(client: TestClient, superadmin_headers, test_user_data):
    user_id = client.post("/auth/register", json=test_user_data).json()["user"]["id"]
    resp = client.put(f"/admin/users/{user_id}/role", json={"role": "overlord"}, headers=superadmin_headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid role specified"


def test_update_role_unknown_user(client: TestClient, superadmin_headers):
    resp = client.put(f"/admin/users/{uuid.uuid4()}/role", json={"role": "user"}, headers=superadmin_headers)
    assert resp.status_code == 404


def test_dashboard_stats(client: TestClient, admin_headers, test_user_data, db_session):
    client.post("/auth/register", json=test_user_data)
    future = datetime(2031, 1, 1, 10, 0)
    past = datetime(2020, 1, 1, 10, 0)
    for start in (future, past):
        payload = {
            "title": f"Event {start.year}",
            "description": "d",
            "date": start.isoformat(),
            "end_date": (start + timedelta(hours=1)).isoformat(),
            "venue": "Hall",
            "type": "upcoming",
        }
        assert client.post("/events", json=payload, headers=admin_headers).status_code == 201

    resp = client.get("/admin/stats", headers=admin_headers)

    assert resp.status_code == 200
    # only the admin has logged in
    assert resp.json() == {"total_users": 2, "active_users": 1, "total_events": 2, "upcoming_events": 1}


def test_admin_events_and_registrations(client: TestClient, admin_headers):
    payload = {
        "title": "Demo day",
        "description": "d",
        "date": "2030-05-01T10:00:00",
        "end_date": "2030-05-01T12:00:00",
        "venue": "Hall",
        "type": "upcoming",
    }
    event_id = client.post("/events", json=payload, headers=admin_headers).json()["id"]

    events = client.get("/admin/events", headers=admin_headers).json()
    assert events["count"] == 1
    assert events["events"][0]["registration_count"] == 0

    registrations = client.get(f"/admin/events/{event_id}/registrations", headers=admin_headers)
    assert registrations.json() == {"count": 0, "registrations": []}
    assert client.get(f"/admin/events/{uuid.uuid4()}/registrations", headers=admin_headers).status_code == 404


def test_backfill_public_ids(client: TestClient, admin_headers, db_session):
    owner = db_session.execute(select(User).where(User.email == "chief@example.com")).scalar_one()
    legacy = Gallery(
        id=uuid.uuid4(),
        title="Legacy",
        description="",
        thumbnail="https://res.cloudinary.com/demo/genx_gallery/cover2019.jpg",
        thumbnail_public_id=None,
        created_by=owner.id,
    )
    legacy.photos = [
        GalleryPhoto(url="https://res.cloudinary.com/demo/genx_gallery/p1.jpg", public_id=None, order=0),
        GalleryPhoto(url="https://res.cloudinary.com/demo/genx_gallery/p2.jpg", public_id="genx_gallery/p2", order=1),
    ]
    db_session.add(legacy)
    db_session.commit()

    resp = client.post("/admin/galleries/backfill-public-ids", headers=admin_headers)

    assert resp.status_code == 200
    assert resp.json() == {"filled": 2}
    db_session.refresh(legacy)
    assert legacy.thumbnail_public_id == "genx_gallery/cover2019"
    assert [p.public_id for p in legacy.photos] == ["genx_gallery/p1", "genx_gallery/p2"]

    assert client.post("/admin/galleries/backfill-public-ids", headers=admin_headers).json() == {"filled": 0}
