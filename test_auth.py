from datetime import timedelta

from conftest import PASSWORD
from taskpulse.models import Role
from taskpulse.utils.security import create_access_token


def test_register_always_creates_an_employee(client):
    response = client.post("/auth/register", json={
        "email": "Self@Example.com",
        "password": "secret123",
        "display_name": "Self Starter",
        "matricule": "S-0001",
        "phone_number": "+1-555-0101",
        "role": "admin",
    })
    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["role"] == "employee"
    assert body["user"]["email"] == "self@example.com"
    assert "refreshToken" in response.cookies


def test_login_and_me(client, make_user):
    user = make_user(Role.MANAGER)
    response = client.post("/auth/login", json={"email": user.email, "password": PASSWORD})
    assert response.status_code == 200
    token = response.json()["access_token"]

    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["id"] == user.id


def test_wrong_password(client, make_user):
    user = make_user()
    response = client.post("/auth/login", json={"email": user.email, "password": "not-it"})
    assert response.status_code == 401


def test_missing_or_bad_token(client):
    assert client.get("/tasks/").status_code == 401
    response = client.get("/tasks/", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_expired_token(client, make_user):
    user = make_user()
    token = create_access_token(data={"sub": user.id}, expires_delta=timedelta(minutes=-1))
    assert client.get("/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401


def test_token_for_deleted_user(client):
    token = create_access_token(data={"sub": "gone"})
    assert client.get("/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 401


def test_refresh_token_from_cookie(client, make_user):
    user = make_user()
    assert client.post("/auth/login", json={"email": user.email, "password": PASSWORD}).status_code == 200

    response = client.post("/auth/refresh-token")
    assert response.status_code == 200
    assert response.json()["user"]["id"] == user.id

    client.post("/auth/logout")
    client.cookies.clear()
    assert client.post("/auth/refresh-token").status_code == 401


def test_access_token_is_not_a_refresh_token(client, make_user):
    user = make_user()
    client.cookies.set("refreshToken", create_access_token(data={"sub": user.id}))
    assert client.post("/auth/refresh-token").status_code == 401
