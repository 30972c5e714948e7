import asyncio
import re
from datetime import timedelta

from labmgr.core.security import PasswordHasher
from labmgr.models.session import UserSession
from labmgr.models.user import User

from conftest import DEFAULT_PASSWORD, promote_to_admin, register, registration_payload

_HEX = re.compile(r"^[0-9a-f]+$")


# -- Registration ------------------------------------------------------------


def test_register_creates_user_and_logs_in(client, db) -> None:
    response = register(client, "alice")

    assert response.status_code == 201
    body = response.json()
    assert body["username"] == "alice"
    assert body["firstName"] == "Alice"
    assert body["role"] == "researcher"
    assert "password" not in body
    assert "labmgr.sid" in response.cookies

    me = client.get("/api/user")
    assert me.status_code == 200
    assert me.json()["id"] == body["id"]
    assert db.query(UserSession).filter(UserSession.user_id == body["id"]).count() == 1


def test_register_stores_hash_dot_salt(client, db) -> None:
    assert register(client, "alice", "Secr3t!").status_code == 201

    stored = db.query(User).filter(User.username == "alice").one().password

    assert stored != "Secr3t!"
    key, salt = stored.split(".")
    assert _HEX.match(key) and _HEX.match(salt)


def test_register_lowercases_username(client) -> None:
    response = register(client, "MixedCase")

    assert response.status_code == 201
    assert response.json()["username"] == "mixedcase"


def test_register_rejects_existing_username_case_insensitively(make_client, db) -> None:
    assert register(make_client(), "alice").status_code == 201

    response = register(make_client(), "ALICE", email="other@lab.example.org")

    assert response.status_code == 400
    assert response.json() == {"detail": "Username already exists"}
    assert db.query(User).count() == 1


def test_register_rejects_existing_email(make_client, db) -> None:
    assert register(make_client(), "alice").status_code == 201

    response = register(make_client(), "bob", email="alice@lab.example.org")

    assert response.status_code == 400
    assert response.json() == {"detail": "Email already exists"}
    assert db.query(User).count() == 1


def test_register_defaults_role_to_student(client) -> None:
    payload = registration_payload("carol")
    del payload["role"]

    response = client.post("/api/register", json=payload)

    assert response.status_code == 201
    assert response.json()["role"] == "student"


def test_register_cannot_self_assign_admin(client, db) -> None:
    response = register(client, "mallory", role="admin")

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request data"
    assert db.query(User).count() == 0


def test_register_rejects_unknown_role_and_missing_fields(client, db) -> None:
    assert register(client, "dave", role="janitor").status_code == 400

    response = client.post("/api/register", json={"username": "dave", "password": "x"})

    assert response.status_code == 400
    fields = {tuple(err["loc"])[-1] for err in response.json()["errors"]}
    assert {"firstName", "lastName", "email"} <= fields
    assert db.query(User).count() == 0


def test_register_multipart_with_profile_picture(client, app, db) -> None:
    form = registration_payload("erin", mobile="", city="Leiden")

    response = client.post(
        "/api/register",
        data=form,
        files={"profilePicture": ("me.png", b"\x89PNG\r\n\x1a\nfake", "image/png")},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["city"] == "Leiden"
    assert body["mobile"] is None
    assert body["profilePicture"].endswith(".png")

    upload_dir = app.state.settings.upload_dir
    with open(f"{upload_dir}/{body['profilePicture']}", "rb") as fh:
        assert fh.read().startswith(b"\x89PNG")


def test_register_multipart_rejects_non_image(client, db) -> None:
    response = client.post(
        "/api/register",
        data=registration_payload("frank"),
        files={"profilePicture": ("run.sh", b"#!/bin/sh", "text/x-shellscript")},
    )

    assert response.status_code == 400
    assert db.query(User).count() == 0


# -- Login / logout ----------------------------------------------------------


def test_login_failures_share_one_body(make_client) -> None:
    assert register(make_client(), "alice", "Secr3t!").status_code == 201

    wrong_password = make_client().post("/api/login", json={"username": "alice", "password": "wrong"})
    unknown_user = make_client().post("/api/login", json={"username": "alice2", "password": "Secr3t!"})

    assert wrong_password.status_code == 401
    assert unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json() == {"error": "Invalid credentials"}
    assert "labmgr.sid" not in wrong_password.cookies


def test_alice_scenario(make_client, db) -> None:
    registered = register(make_client(), "alice", "Secr3t!")
    assert registered.status_code == 201
    key, salt = db.query(User).filter(User.username == "alice").one().password.split(".")
    assert _HEX.match(key) and _HEX.match(salt)

    ok = make_client().post("/api/login", json={"username": "alice", "password": "Secr3t!"})
    assert ok.status_code == 200
    assert ok.json()["username"] == "alice"

    bad = make_client().post("/api/login", json={"username": "alice", "password": "wrong"})
    missing = make_client().post("/api/login", json={"username": "alice2", "password": "Secr3t!"})
    assert bad.status_code == missing.status_code == 401
    assert bad.json().keys() == missing.json().keys()


def test_login_username_is_case_insensitive(make_client) -> None:
    assert register(make_client(), "alice").status_code == 201

    response = make_client().post("/api/login", json={"username": "ALICE", "password": DEFAULT_PASSWORD})

    assert response.status_code == 200
    assert "password" not in response.json()


def test_login_replaces_the_previous_session(make_client, db) -> None:
    client = make_client()
    user_id = register(client, "alice").json()["id"]

    assert client.post("/api/login", json={"username": "alice", "password": DEFAULT_PASSWORD}).status_code == 200

    assert db.query(UserSession).filter(UserSession.user_id == user_id).count() == 1


def test_logout_ends_the_session(client, db) -> None:
    assert register(client, "alice").status_code == 201

    response = client.post("/api/logout")

    assert response.status_code == 200
    assert db.query(UserSession).count() == 0
    assert client.get("/api/user").status_code == 401


def test_logout_without_session_is_harmless(client) -> None:
    assert client.post("/api/logout").status_code == 200


def test_unauthenticated_user_endpoint_returns_bare_401(client) -> None:
    response = client.get("/api/user")

    assert response.status_code == 401
    assert response.json() == {"detail": "Unauthorized"}


def test_forged_cookie_is_ignored(client) -> None:
    client.cookies.set("labmgr.sid", "not-a-signed-token")

    assert client.get("/api/user").status_code == 401


def test_session_of_deleted_user_is_unauthenticated(client, db) -> None:
    user_id = register(client, "alice").json()["id"]

    db.query(User).filter(User.id == user_id).delete()
    db.commit()

    assert client.get("/api/user").status_code == 401


# -- Profile ---------------------------------------------------------------


def test_update_own_profile(client) -> None:
    assert register(client, "alice").status_code == 201

    response = client.put("/api/user", json={"city": "Utrecht", "mobile": "+31 6 1234"})

    assert response.status_code == 200
    assert response.json()["city"] == "Utrecht"
    assert response.json()["mobile"] == "+31 6 1234"


def test_update_profile_ignores_role(client) -> None:
    assert register(client, "alice").status_code == 201

    response = client.put("/api/user", json={"role": "admin", "city": "Delft"})

    assert response.status_code == 200
    assert response.json()["role"] == "researcher"


def test_update_profile_requires_some_field(client) -> None:
    assert register(client, "alice").status_code == 201

    response = client.put("/api/user", json={})

    assert response.status_code == 400
    assert response.json() == {"detail": "No update data provided"}


def test_update_profile_rejects_taken_email(make_client) -> None:
    assert register(make_client(), "bob").status_code == 201
    client = make_client()
    assert register(client, "alice").status_code == 201

    response = client.put("/api/user", json={"email": "bob@lab.example.org"})

    assert response.status_code == 400


# -- Password reset --------------------------------------------------------


def test_reset_own_password(make_client) -> None:
    client = make_client()
    assert register(client, "alice").status_code == 201

    response = client.post("/api/reset-password", json={"username": "alice", "password": "N3w-pass"})

    assert response.status_code == 200
    fresh = make_client()
    assert fresh.post("/api/login", json={"username": "alice", "password": DEFAULT_PASSWORD}).status_code == 401
    assert fresh.post("/api/login", json={"username": "alice", "password": "N3w-pass"}).status_code == 200


def test_reset_someone_elses_password_is_forbidden(make_client) -> None:
    assert register(make_client(), "bob").status_code == 201
    client = make_client()
    assert register(client, "alice").status_code == 201

    response = client.post("/api/reset-password", json={"username": "bob", "password": "hijack"})

    assert response.status_code == 403
    assert response.json() == {"detail": "You can only reset your own password"}


def test_admin_can_reset_any_password(make_client, admin_client) -> None:
    assert register(make_client(), "bob").status_code == 201

    response = admin_client.post("/api/reset-password", json={"username": "bob", "password": "Fresh1"})

    assert response.status_code == 200
    assert make_client().post("/api/login", json={"username": "bob", "password": "Fresh1"}).status_code == 200


def test_reset_password_validation(client) -> None:
    assert client.post("/api/reset-password", json={"username": "x", "password": "y"}).status_code == 401

    assert register(client, "alice").status_code == 201
    assert client.post("/api/reset-password", json={"username": "alice"}).status_code == 400
    assert client.post("/api/reset-password", json={"username": "ghost", "password": "y"}).status_code == 404


def test_login_with_missing_fields_is_the_generic_401(client) -> None:
    assert register(client, "alice").status_code == 201

    for body in ({}, {"username": "alice"}, {"password": DEFAULT_PASSWORD}, {"username": "", "password": ""}):
        response = client.post("/api/login", json=body)
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials"}


# -- Session cookie ----------------------------------------------------------


def test_session_cookie_lasts_for_the_browser_session(client) -> None:
    response = register(client, "alice")

    set_cookie = response.headers["set-cookie"].lower()

    assert set_cookie.startswith("labmgr.sid=")
    assert "httponly" in set_cookie
    assert "max-age" not in set_cookie
    assert "expires" not in set_cookie


def test_active_session_keeps_working_past_its_original_expiry(client, db) -> None:
    assert register(client, "alice").status_code == 201
    row = db.query(UserSession).one()
    first_expiry = row.expires_at
    db.query(UserSession).update({UserSession.expires_at: first_expiry - timedelta(hours=23, minutes=59)})
    db.commit()

    assert client.get("/api/user").status_code == 200

    db.expire_all()
    assert db.query(UserSession).one().expires_at >= first_expiry


def test_registration_hashing_runs_off_the_event_loop(client, app) -> None:
    seen = []

    class _RecordingHasher(PasswordHasher):
        def hash(self, password: str) -> str:
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                seen.append("worker thread")
            else:
                seen.append("event loop")
            return super().hash(password)

    app.state.auth.hasher = _RecordingHasher()

    assert register(client, "alice").status_code == 201
    assert seen == ["worker thread"]
