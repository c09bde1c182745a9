import pytest
from django.test import Client as HttpClient

from accounts.models import Profile

pytestmark = pytest.mark.django_db


def register(http, **overrides):
    payload = {
        "full_name": "Nomsa Dlamini",
        "email": "nomsa@example.com",
        "password": "secret123",
        "role": "client",
    }
    payload.update(overrides)
    return http.post("/api/v1/auth/register", payload, content_type="application/json")


def test_register_creates_profile_and_session():
    http = HttpClient()

    response = register(http, role="vendor", phone="+27 21 555 0100")

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["role"] == "vendor"
    assert body["user"]["phone"] == "+27 21 555 0100"
    assert Profile.objects.get(email="nomsa@example.com").user.username == "nomsa@example.com"

    me = http.get("/api/v1/users/me")
    assert me.status_code == 200
    assert me.json()["user"]["full_name"] == "Nomsa Dlamini"


@pytest.mark.parametrize("overrides, message", [
    ({"role": "admin"}, "role must be 'client' or 'vendor'"),
    ({"password": "123"}, "Password must be at least 6 characters"),
    ({"full_name": ""}, "full_name is required"),
    ({"password": 12345678}, "password must be text"),
    ({"email": ["nomsa@example.com"]}, "email must be text"),
    ({"phone": 215550100}, "phone must be text"),
])
def test_register_rejects_invalid_input(overrides, message):
    response = register(HttpClient(), **overrides)

    assert response.status_code == 400
    assert response.json()["error"] == message
    assert not Profile.objects.exists()


def test_register_rejects_duplicate_email(client_profile):
    response = register(HttpClient(), email=client_profile.email)

    assert response.status_code == 400
    assert Profile.objects.count() == 1


def test_login(client_profile):
    http = HttpClient()

    response = http.post(
        "/api/v1/auth/login",
        {"email": client_profile.email, "password": "secret123"},
        content_type="application/json",
    )

    assert response.status_code == 200
    assert response.json()["user"]["role"] == "client"
    assert http.get("/api/v1/users/me").status_code == 200


def test_login_wrong_password(client_profile):
    response = HttpClient().post(
        "/api/v1/auth/login",
        {"email": client_profile.email, "password": "nope-nope"},
        content_type="application/json",
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Wrong password"


def test_login_unknown_email():
    response = HttpClient().post(
        "/api/v1/auth/login",
        {"email": "ghost@example.com", "password": "secret123"},
        content_type="application/json",
    )

    assert response.status_code == 404


def test_logout_ends_session(client_profile, login):
    http = login(client_profile)

    assert http.post("/api/v1/auth/logout").status_code == 200
    assert http.get("/api/v1/users/me").status_code == 401


def test_anonymous_request_gets_session_expired():
    response = HttpClient().get("/api/v1/users/me")

    assert response.status_code == 401
    assert response.json()["error"] == "session_expired"


def test_update_profile_keeps_role(client_profile, login):
    http = login(client_profile)

    response = http.put(
        "/api/v1/users/me",
        {"full_name": "Hana H.", "role": "vendor"},
        content_type="application/json",
    )

    assert response.status_code == 200
    client_profile.refresh_from_db()
    assert client_profile.full_name == "Hana H."
    assert client_profile.role == Profile.ROLE_CLIENT


def test_wrong_role_is_forbidden(client_profile, login):
    response = login(client_profile).get("/api/v1/vendor/services")

    assert response.status_code == 403


def test_login_is_rate_limited(client_profile, settings):
    settings.RATELIMIT_ENABLE = True
    http = HttpClient()

    statuses = [
        http.post(
            "/api/v1/auth/login",
            {"email": client_profile.email, "password": "nope-nope"},
            content_type="application/json",
        ).status_code
        for _ in range(25)
    ]

    assert statuses[0] == 401
    assert statuses[-1] == 429


def test_register_needs_a_json_object():
    response = HttpClient().post("/api/v1/auth/register", ["nomsa@example.com"], content_type="application/json")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid JSON"


def test_login_rejects_non_text_credentials(client_profile):
    response = HttpClient().post(
        "/api/v1/auth/login",
        {"email": client_profile.email, "password": 123456},
        content_type="application/json",
    )

    assert response.status_code == 400


def test_update_profile_rejects_non_text(client_profile, login):
    response = login(client_profile).put("/api/v1/users/me", {"full_name": 7}, content_type="application/json")

    assert response.status_code == 400
    client_profile.refresh_from_db()
    assert client_profile.full_name == "Hana Host"
