import pytest
from fastapi.testclient import TestClient

from authhub.main import create_app
from authhub.services.errors import ConfigurationMissing
from authhub.services.sessions import SessionManager

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "AdminPass123!"

REGISTRATION = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "a@example.com",
    "password": "Pass123!",
    "confirm_password": "Pass123!",
}


@pytest.fixture
def client(settings):
    app = create_app(settings.model_copy(update={
        "admin_email": ADMIN_EMAIL,
        "admin_password": ADMIN_PASSWORD,
    }))
    with TestClient(app) as test_client:
        yield test_client


def register(client, **overrides):
    return client.post("/v1/auth/register", json={**REGISTRATION, **overrides})


def login(client, email="a@example.com", password="Pass123!"):
    return client.post("/v1/auth/login", json={"email": email, "password": password})


def bearer(session):
    return {"Authorization": f"Bearer {session['token']}"}


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "AuthHub"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "connected"


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"

    generated = client.get("/health")
    assert generated.headers["X-Request-ID"]


# =============================================================================
# Register
# =============================================================================

def test_register_returns_session(client):
    response = register(client)
    assert response.status_code == 201
    data = response.json()
    assert data["token"]
    assert data["refresh_token"]
    assert data["token_type"] == "bearer"
    assert data["email"] == "a@example.com"
    assert data["full_name"] == "Ada Lovelace"
    assert data["role"] == "user"
    assert data["user_id"]
    assert response.headers["Cache-Control"] == "no-store"


def test_register_duplicate_email_conflicts(client):
    assert register(client).status_code == 201

    response = register(client)
    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "duplicate_account"
    assert body["message"]
    assert body["request_id"]


@pytest.mark.parametrize("overrides", [
    {"confirm_password": "Other123!"},
    {"password": "abc", "confirm_password": "abc"},
    {"email": "not-an-email"},
    {"first_name": "   "},
    {"last_name": ""},
])
def test_register_rejects_invalid_input(client, overrides):
    response = register(client, **overrides)
    assert response.status_code == 422


# =============================================================================
# Login
# =============================================================================

def test_login_issues_new_pair(client):
    first = register(client).json()

    response = login(client)
    assert response.status_code == 200
    second = response.json()
    assert second["token"] != first["token"]
    assert second["refresh_token"] != first["refresh_token"]


def test_login_failures_look_the_same(client):
    register(client)

    wrong_password = login(client, password="Wrong123!")
    unknown_email = login(client, email="nobody@example.com")

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json()["error"] == unknown_email.json()["error"] == "invalid_credentials"
    assert wrong_password.json()["message"] == unknown_email.json()["message"]
    assert wrong_password.headers["WWW-Authenticate"] == "Bearer"


# =============================================================================
# Refresh
# =============================================================================

def test_refresh_rotates_and_old_token_stops_working(client):
    first = register(client).json()

    response = client.post("/v1/auth/refresh", json={"refresh_token": first["refresh_token"]})
    assert response.status_code == 200
    second = response.json()
    assert second["refresh_token"] != first["refresh_token"]

    replay = client.post("/v1/auth/refresh", json={"refresh_token": first["refresh_token"]})
    assert replay.status_code == 401
    assert replay.json()["error"] == "invalid_or_expired_token"

    again = client.post("/v1/auth/refresh", json={"refresh_token": second["refresh_token"]})
    assert again.status_code == 200


def test_refresh_with_unknown_token(client):
    register(client)

    response = client.post("/v1/auth/refresh", json={"refresh_token": "invalidtoken"})
    assert response.status_code == 401


def test_new_access_token_is_accepted(client):
    first = register(client).json()
    second = client.post("/v1/auth/refresh", json={"refresh_token": first["refresh_token"]}).json()

    response = client.get("/v1/auth/me", headers=bearer(second))
    assert response.status_code == 200


# =============================================================================
# Logout
# =============================================================================

def test_logout_revokes_refresh_token(client):
    session = register(client).json()

    response = client.post(
        "/v1/auth/logout",
        json={"refresh_token": session["refresh_token"]},
        headers=bearer(session),
    )
    assert response.status_code == 204

    refresh = client.post("/v1/auth/refresh", json={"refresh_token": session["refresh_token"]})
    assert refresh.status_code == 401

    me = client.get("/v1/auth/me", headers=bearer(session))
    assert me.json()["has_active_session"] is False


def test_logout_with_bad_refresh_token_revokes_own_session(client):
    session = register(client).json()

    response = client.post(
        "/v1/auth/logout",
        json={"refresh_token": "invalidtoken"},
        headers=bearer(session),
    )
    assert response.status_code == 204

    refresh = client.post("/v1/auth/refresh", json={"refresh_token": session["refresh_token"]})
    assert refresh.status_code == 401


def test_logout_requires_access_token(client):
    session = register(client).json()

    response = client.post("/v1/auth/logout", json={"refresh_token": session["refresh_token"]})
    assert response.status_code == 401

    refresh = client.post("/v1/auth/refresh", json={"refresh_token": session["refresh_token"]})
    assert refresh.status_code == 200


# =============================================================================
# Profile and admin
# =============================================================================

def test_me_returns_profile(client):
    session = register(client, phone_number="+1 555 0100").json()

    response = client.get("/v1/auth/me", headers=bearer(session))
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "a@example.com"
    assert data["full_name"] == "Ada Lovelace"
    assert data["phone_number"] == "+1 555 0100"
    assert data["role"] == "user"
    assert data["email_verified"] is False
    assert data["has_active_session"] is True
    assert "password_hash" not in data
    assert "refresh_token_hash" not in data


def test_me_rejects_bad_token(client):
    response = client.get("/v1/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
    assert response.status_code == 401
    body = response.json()
    assert body["error"] == "not_authenticated"
    assert body["message"]
    assert body["request_id"] == response.headers["X-Request-ID"]
    assert response.headers["WWW-Authenticate"] == "Bearer"

    missing = client.get("/v1/auth/me")
    assert missing.status_code == 401
    assert missing.json()["error"] == "not_authenticated"


def test_admin_lists_users(client):
    register(client)
    admin = login(client, ADMIN_EMAIL, ADMIN_PASSWORD).json()
    assert admin["role"] == "admin"

    response = client.get("/v1/users", headers=bearer(admin))
    assert response.status_code == 200
    emails = {user["email"] for user in response.json()}
    assert emails == {ADMIN_EMAIL, "a@example.com"}


def test_regular_user_cannot_list_users(client):
    session = register(client).json()

    response = client.get("/v1/users", headers=bearer(session))
    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"


def test_missing_signing_key_fails_at_startup(settings):
    production = settings.model_copy(update={"environment": "production", "jwt_secret_key": None})

    with pytest.raises(ConfigurationMissing):
        create_app(production)


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/v1/nope")
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_unexpected_error_is_sanitized(settings, monkeypatch):
    async def exploding_login(self, email, password):
        raise RuntimeError("database password is hunter2")

    monkeypatch.setattr(SessionManager, "login", exploding_login)

    with TestClient(create_app(settings), raise_server_exceptions=False) as client:
        response = client.post("/v1/auth/login", json={"email": "a@example.com", "password": "Pass123!"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "server_error"
    assert body["message"] == "An internal error occurred"
    assert "hunter2" not in response.text
