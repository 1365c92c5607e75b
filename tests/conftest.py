"""Shared fixtures: an in-memory app plus helpers that drive it like a client would."""

import io

import pytest

from campusconnect import create_app
from campusconnect.extensions import db
from campusconnect.models import Achievement, Course, Notification, User

API = "/api/v1"


@pytest.fixture
def app(tmp_path):
    app = create_app("testing")
    app.config["UPLOAD_DIR"] = str(tmp_path / "uploads")
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def make_user(app):
    """Register an account through the API and return ``(client, user_id)``.

    Every account gets its own test client, so its session cookie stays separate.
    """

    def _make(name, admin=False, email=None, password="secret123"):
        client = app.test_client()
        response = client.post(
            f"{API}/auth/register",
            json={
                "name": name,
                "email": email or f"{name.lower().replace(' ', '.')}@uni.edu",
                "password": password,
                "university": "State University",
            },
        )
        assert response.status_code == 201, response.get_json()
        user_id = response.get_json()["user"]["id"]
        if admin:
            with app.app_context():
                db.session.get(User, user_id).role = "admin"
                db.session.commit()
        return client, user_id

    return _make


@pytest.fixture
def make_course(app):
    def _make(code="CS101", name="Intro to Computing", university="State University", **extra):
        with app.app_context():
            course = Course(name=name, code=code, university=university, department="Computer Science", **extra)
            db.session.add(course)
            db.session.commit()
            return course.id

    return _make


@pytest.fixture
def make_achievement(app):
    def _make(name, type, count, points=10, rarity="common"):
        with app.app_context():
            achievement = Achievement(
                name=name,
                description=f"{name} badge",
                type=type,
                criteria_count=count,
                points=points,
                rarity=rarity,
            )
            db.session.add(achievement)
            db.session.commit()
            return achievement.id

    return _make


@pytest.fixture
def upload(app):
    """Upload a small resource file as ``client`` and return the response."""

    def _upload(client, course_id, title="Week 1 notes", type="notes", filename="notes.pdf", **fields):
        data = {
            "title": title,
            "type": type,
            "course": str(course_id),
            "resource_file": (io.BytesIO(b"%PDF-1.4 lecture notes"), filename),
        }
        data.update(fields)
        return client.post(f"{API}/resources", data=data, content_type="multipart/form-data")

    return _upload


@pytest.fixture
def notifications(app):
    """Return the ``(type, sender_id)`` pairs of a user's notifications, oldest first."""

    def _list(user_id, type=None):
        with app.app_context():
            query = Notification.query.filter_by(recipient_id=user_id)
            if type is not None:
                query = query.filter_by(type=type)
            return [(n.type, n.sender_id) for n in query.order_by(Notification.id.asc()).all()]

    return _list
