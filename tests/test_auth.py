from datetime import timedelta

from finance_tracker.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)

new_user = {"email": "ada@example.com", "password": "correct-horse", "name": "Ada"}


def test_password_hashing():
    hashed = get_password_hash("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong-pass", hashed)
    assert not verify_password("s3cret-pass", "not-a-bcrypt-hash")


def test_token_round_trip():
    token = create_access_token(data={"sub": "user-1"})
    assert decode_access_token(token)["sub"] == "user-1"


def test_expired_token_is_rejected(client):
    token = create_access_token(data={"sub": "user-1"}, expires_delta=timedelta(minutes=-1))
    response = client.get("/api/categories", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_register_login_and_me(client):
    response = client.post("/api/auth/register", json=new_user)
    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "ada@example.com"
    assert "password_hash" not in body

    response = client.post("/api/auth/login", json={"email": new_user["email"], "password": new_user["password"]})
    assert response.status_code == 200
    login = response.json()
    assert login["token_type"] == "bearer"
    assert login["user"]["name"] == "Ada"

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {login['access_token']}"})
    assert response.status_code == 200
    assert response.json()["id"] == body["id"]


def test_register_duplicate_email(client):
    assert client.post("/api/auth/register", json=new_user).status_code == 201
    response = client.post("/api/auth/register", json=new_user)
    assert response.status_code == 400


def test_register_rejects_short_password(client):
    response = client.post("/api/auth/register", json={**new_user, "password": "short"})
    assert response.status_code == 422


def test_login_wrong_password(client):
    client.post("/api/auth/register", json=new_user)
    response = client.post("/api/auth/login", json={"email": new_user["email"], "password": "nope-nope"})
    assert response.status_code == 401


def test_login_unknown_user(client):
    response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "whatever1"})
    assert response.status_code == 401


def test_protected_routes_need_token(client):
    assert client.get("/api/expenses").status_code == 401
    assert client.get("/api/analytics/summary").status_code == 401
    assert client.get("/api/categories", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_health_is_public(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_register_rejects_password_over_bcrypt_limit(client):
    response = client.post("/api/auth/register", json={**new_user, "password": "x" * 80})
    assert response.status_code == 422
    # multi-byte characters count by their encoded size
    response = client.post("/api/auth/register", json={**new_user, "password": "é" * 40})
    assert response.status_code == 422
    assert client.post("/api/auth/register", json={**new_user, "password": "x" * 72}).status_code == 201
