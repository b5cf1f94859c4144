import pytest

from core.errors import AuthenticationFailed, ValidationFailed
from models.userModel import Users
from services import authService


def register(**overrides):
    data = dict(email="Jane@Example.com", password="s3cretpass", first_name="Jane", last_name="Doe")
    data.update(overrides)
    return authService.register_user(**data)


def test_register_hashes_password_and_defaults_role(app):
    user = register(phone="555-0199")

    assert user.email == "jane@example.com"
    assert user.role == "customer"
    assert user.password_hash != "s3cretpass"
    assert "password_hash" not in user.to_dict()


def test_register_duplicate_email(app):
    register()
    with pytest.raises(ValidationFailed, match="User with this email already exists"):
        register(email="jane@example.com")
    assert Users.query.count() == 1


@pytest.mark.parametrize("overrides", [
    {"email": "not-an-email"},
    {"password": "short"},
    {"first_name": ""},
])
def test_register_validation(app, overrides):
    with pytest.raises(ValidationFailed):
        register(**overrides)


def test_login_returns_token(app):
    user = register()

    result = authService.login_user("jane@example.com", "s3cretpass")

    assert result["user"].id == user.id
    assert result["token"]


@pytest.mark.parametrize("email,password", [
    ("jane@example.com", "wrong-password"),
    ("nobody@example.com", "s3cretpass"),
])
def test_login_failures_share_one_message(app, email, password):
    register()
    with pytest.raises(AuthenticationFailed, match="Invalid email or password"):
        authService.login_user(email, password)


def test_register_login_me_over_http(client):
    response = client.post("/api/auth/register", json={
        "email": "sam@example.com", "password": "password123", "first_name": "Sam", "last_name": "Lee",
    })
    assert response.status_code == 201

    response = client.post("/api/auth/login", json={"email": "sam@example.com", "password": "password123"})
    assert response.status_code == 200
    token = response.get_json()["token"]

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.get_json()["user"]["email"] == "sam@example.com"


def test_bad_login_over_http(client):
    response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "whatever1"})

    assert response.status_code == 401
    assert response.get_json() == {"message": "Invalid email or password", "error": "AuthenticationFailed"}


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401
