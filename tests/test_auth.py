from campusconnect.extensions import db
from campusconnect.models import User

from conftest import API


def test_register_creates_logged_in_student(app, make_user):
    client, user_id = make_user("Alice Smith")

    me = client.get(f"{API}/auth/me")
    assert me.status_code == 200
    body = me.get_json()["user"]
    assert body["id"] == user_id
    assert body["role"] == "student"
    assert body["email"] == "alice.smith@uni.edu"
    assert body["contribution_count"] == 0

    with app.app_context():
        user = db.session.get(User, user_id)
        assert user.password_hash != "secret123"


def test_register_ignores_requested_role(app):
    client = app.test_client()
    response = client.post(
        f"{API}/auth/register",
        json={
            "name": "Mallory",
            "email": "mallory@uni.edu",
            "password": "secret123",
            "university": "State University",
            "role": "admin",
        },
    )
    assert response.status_code == 201
    assert response.get_json()["user"]["role"] == "student"


def test_register_rejects_duplicate_email(app, make_user):
    make_user("Alice Smith")
    response = app.test_client().post(
        f"{API}/auth/register",
        json={
            "name": "Alice Again",
            "email": "ALICE.SMITH@uni.edu",
            "password": "secret123",
            "university": "State University",
        },
    )
    assert response.status_code == 400
    assert response.get_json() == {"msg": "Email already exists"}


def test_register_validates_required_fields(app):
    response = app.test_client().post(f"{API}/auth/register", json={"email": "x@uni.edu"})
    assert response.status_code == 400
    assert "msg" in response.get_json()


def test_login_and_logout(app, make_user):
    make_user("Bob Jones")
    client = app.test_client()

    bad = client.post(f"{API}/auth/login", json={"email": "bob.jones@uni.edu", "password": "wrong-pass"})
    assert bad.status_code == 401
    assert bad.get_json() == {"msg": "Invalid Credentials"}

    good = client.post(f"{API}/auth/login", json={"email": "bob.jones@uni.edu", "password": "secret123"})
    assert good.status_code == 200
    assert client.get(f"{API}/auth/me").status_code == 200

    assert client.post(f"{API}/auth/logout").status_code == 200
    assert client.get(f"{API}/auth/me").status_code == 401


def test_protected_route_requires_session(app):
    response = app.test_client().get(f"{API}/notifications")
    assert response.status_code == 401
    assert response.get_json() == {"msg": "Authentication invalid"}


def test_change_password(app, make_user):
    client, _ = make_user("Carol White")

    wrong = client.patch(
        f"{API}/users/me/password", json={"oldPassword": "nope-nope", "newPassword": "another123"}
    )
    assert wrong.status_code == 401

    ok = client.patch(
        f"{API}/users/me/password", json={"oldPassword": "secret123", "newPassword": "another123"}
    )
    assert ok.status_code == 200

    fresh = app.test_client()
    login = fresh.post(f"{API}/auth/login", json={"email": "carol.white@uni.edu", "password": "another123"})
    assert login.status_code == 200


def test_inactive_account_cannot_log_in(app, make_user):
    _, user_id = make_user("Dan Brown")
    with app.app_context():
        db.session.get(User, user_id).is_active_user = False
        db.session.commit()

    response = app.test_client().post(
        f"{API}/auth/login", json={"email": "dan.brown@uni.edu", "password": "secret123"}
    )
    assert response.status_code == 401


def test_non_text_fields_are_rejected(app, make_user):
    client = app.test_client()
    response = client.post(
        f"{API}/auth/register",
        json={"name": 123, "email": "num@uni.edu", "password": "secret123", "university": "State University"},
    )
    assert response.status_code == 400
    assert response.get_json() == {"msg": "Name must be text."}
    assert client.post(f"{API}/auth/login", json={"email": "num@uni.edu", "password": 123456}).status_code == 400

    alice, _ = make_user("Alice Smith")
    assert alice.patch(f"{API}/users/me", json={"name": 123}).status_code == 400
    bad_password = {"oldPassword": "secret123", "newPassword": 1234567}
    assert alice.patch(f"{API}/users/me/password", json=bad_password).status_code == 400
