from fastapi.testclient import TestClient

from tests.helpers import member_data, register_and_login


def test_get_me_unauthenticated(client: TestClient):
    response = client.get("/me")
    assert response.status_code == 401
    assert response.json()["detail"] == "Not authenticated"


def test_get_me(authenticated_client: TestClient, test_user_data):
    response = authenticated_client.get("/me")
    assert response.status_code == 200
    assert response.json()["email"] == test_user_data["email"]
    assert response.json()["branch"] == "CSE"


def test_update_profile(authenticated_client: TestClient):
    response = authenticated_client.put("/me", json={"name": "Asha V", "semester": "6", "registration_no": "21bcs777"})
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Asha V"
    assert data["semester"] == "6"
    assert data["registration_no"] == "21BCS777"

    assert authenticated_client.get("/me").json()["name"] == "Asha V"


def test_update_profile_rejects_taken_email(authenticated_client: TestClient):
    authenticated_client.post("/auth/register", json=member_data(3))
    response = authenticated_client.put("/me", json={"email": "member3@example.com"})
    assert response.status_code == 400


def test_update_profile_unauthenticated(client: TestClient):
    assert client.put("/me", json={"name": "Name"}).status_code == 401


def test_change_password(authenticated_client: TestClient, test_user_data):
    payload = {"current_password": test_user_data["password"], "new_password": "newpass123"}
    resp = authenticated_client.put("/me/password", json=payload)
    assert resp.status_code == 200
    assert "Password updated" in resp.json()["message"]

    authenticated_client.headers.clear()
    old = authenticated_client.post("/auth/login", json={"email": test_user_data["email"], "password": test_user_data["password"]})
    assert old.status_code == 401
    new = authenticated_client.post("/auth/login", json={"email": test_user_data["email"], "password": "newpass123"})
    assert new.status_code == 200


def test_change_password_wrong_current(authenticated_client: TestClient):
    resp = authenticated_client.put("/me/password", json={"current_password": "nope-nope", "new_password": "newpass123"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Current password is incorrect"


def test_tokens_are_per_user(client: TestClient):
    first = register_and_login(client, member_data(4))
    second = register_and_login(client, member_data(5))
    assert client.get("/me", headers={"Authorization": f"Bearer {first}"}).json()["email"] == "member4@example.com"
    assert client.get("/me", headers={"Authorization": f"Bearer {second}"}).json()["email"] == "member5@example.com"
