from fastapi.testclient import TestClient

from pprblog.main import create_app
from pprblog.models import UserSession


def _cookie_value(set_cookie_header: str, cookie_name: str = "auth-token") -> str:
    token_part = set_cookie_header.split(";", 1)[0]
    name, value = token_part.split("=", 1)
    assert name == cookie_name
    return value


def test_signup_sets_httponly_lax_session_cookie(signup):
    response = signup()
    data = response.json()
    set_cookie = response.headers.get("set-cookie", "")

    assert data["success"] is True
    assert data["user"]["name"] == "Ann"
    assert data["user"]["email"] == "ann@x.com"
    assert data["user"]["role"] == "user"
    assert set(data["user"]) == {"id", "name", "email", "role"}
    assert "auth-token=" in set_cookie
    assert "HttpOnly" in set_cookie
    assert "samesite=lax" in set_cookie.lower()
    assert "Path=/" in set_cookie
    assert "Max-Age=604800" in set_cookie
    assert "Secure" not in set_cookie


def test_cookie_is_secure_in_production(settings, storage):
    client = TestClient(create_app(settings=settings.model_copy(update={"environment": "production"}), storage=storage))

    response = client.post(
        "/api/auth/signup",
        json={"name": "Ann", "email": "ann@x.com", "password": "secret1"},
    )

    assert response.status_code == 200
    assert "Secure" in response.headers["set-cookie"]


def test_duplicate_signup_is_conflict(client, signup):
    signup()

    response = client.post(
        "/api/auth/signup",
        json={"name": "Another Ann", "email": "ann@x.com", "password": "secret2"},
    )

    assert response.status_code == 409
    assert response.json()["detail"] == "User with this email already exists"


def test_signup_validation_errors_are_bad_request(client):
    for payload in (
        {"name": "A", "email": "ann@x.com", "password": "secret1"},
        {"name": "Ann", "email": "not-an-email", "password": "secret1"},
        {"name": "Ann", "email": "ann@x.com", "password": "short"},
        {"email": "ann@x.com", "password": "secret1"},
        {"name": "Ann", "email": "ann@x.com", "password": "x" * 73},
    ):
        response = client.post("/api/auth/signup", json=payload)
        assert response.status_code == 400, payload
        assert response.json()["error"] == "Invalid input data"
        assert "set-cookie" not in response.headers


def test_login_success_and_generic_failure(client, signup):
    signup()
    client.cookies.clear()

    ok = client.post("/api/auth/login", json={"email": "ann@x.com", "password": "secret1"})
    assert ok.status_code == 200
    assert ok.json()["user"]["email"] == "ann@x.com"
    assert "auth-token=" in ok.headers["set-cookie"]

    wrong_password = client.post("/api/auth/login", json={"email": "ann@x.com", "password": "wrongpw"})
    unknown_email = client.post("/api/auth/login", json={"email": "nobody@x.com", "password": "secret1"})

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"detail": "Invalid email or password"}
    assert "set-cookie" not in wrong_password.headers


def test_session_cookie_authenticates_me(client, signup):
    signup()

    me = client.get("/api/users/me")

    assert me.status_code == 200
    assert me.json()["email"] == "ann@x.com"
    assert "password_hash" not in me.json()


def test_logout_revokes_session_server_side(client, signup, storage):
    signup()
    client.cookies.clear()
    login = client.post("/api/auth/login", json={"email": "ann@x.com", "password": "secret1"})
    token = _cookie_value(login.headers["set-cookie"])

    logout = client.post("/api/auth/logout", headers={"Cookie": f"auth-token={token}"})
    assert logout.status_code == 200
    assert logout.json() == {"success": True}
    assert "auth-token=" in logout.headers["set-cookie"]
    assert "Max-Age=0" in logout.headers["set-cookie"]

    # Token still verifies cryptographically but its session row is gone
    client.cookies.clear()
    replay = client.get("/api/users/me", headers={"Cookie": f"auth-token={token}"})
    assert replay.status_code == 401
    assert replay.json()["detail"] == "Not authenticated"


def test_logout_only_revokes_the_presented_session(client, signup, storage):
    first = _cookie_value(signup().headers["set-cookie"])
    client.cookies.clear()
    second = _cookie_value(
        client.post("/api/auth/login", json={"email": "ann@x.com", "password": "secret1"}).headers["set-cookie"]
    )
    client.cookies.clear()

    client.post("/api/auth/logout", headers={"Cookie": f"auth-token={first}"})

    assert client.get("/api/users/me", headers={"Cookie": f"auth-token={first}"}).status_code == 401
    assert client.get("/api/users/me", headers={"Cookie": f"auth-token={second}"}).status_code == 200
    with storage.session_factory() as db:
        assert db.query(UserSession).count() == 1


def test_logout_without_session_still_succeeds(client):
    assert client.post("/api/auth/logout").json() == {"success": True}
    assert client.post("/api/auth/logout", headers={"Cookie": "auth-token=garbage"}).status_code == 200


def test_session_endpoint_reports_anonymous_and_authenticated(client, signup):
    anonymous = client.get("/api/auth/session", headers={"Cookie": "auth-token=not.a.jwt"})
    assert anonymous.status_code == 200
    assert anonymous.json() == {"is_authenticated": False, "user": None}

    signup()
    authenticated = client.get("/api/auth/session").json()
    assert authenticated["is_authenticated"] is True
    assert authenticated["user"]["name"] == "Ann"


def test_protected_procedure_without_cookie_is_unauthorized(client):
    assert client.get("/api/users/me").status_code == 401
    assert client.patch("/api/users/me", json={"bio": "hi"}).status_code == 401
    assert client.post("/api/posts", json={"title": "t", "content": "c"}).status_code == 401


def test_storage_failure_during_lookup_degrades_to_anonymous(client, signup, storage, monkeypatch):
    signup()

    def broken(session_id):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(storage, "find_session_by_id", broken)

    assert client.get("/api/auth/session").json()["is_authenticated"] is False
    assert client.get("/api/posts").status_code == 200


def test_unexpected_signup_error_is_opaque_500(settings, storage, monkeypatch):
    client = TestClient(create_app(settings=settings, storage=storage), raise_server_exceptions=False)

    def broken(**kwargs):
        raise RuntimeError("connection reset by peer")

    monkeypatch.setattr(storage, "insert_user", broken)

    response = client.post(
        "/api/auth/signup",
        json={"name": "Ann", "email": "ann@x.com", "password": "secret1"},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
