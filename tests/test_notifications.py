from datetime import timedelta

import pytest

from campusconnect.errors import BadRequestError
from campusconnect.extensions import db
from campusconnect.models import Notification
from campusconnect.models.base import utcnow
from campusconnect.services import NotificationService

from conftest import API


def _notify(app, user_id, count=1, **fields):
    with app.app_context():
        ids = []
        for index in range(count):
            notification = NotificationService.notify_system_update(user_id, f"Message {index}")
            for key, value in fields.items():
                setattr(notification, key, value)
            db.session.commit()
            ids.append(notification.id)
        return ids


def test_list_and_read_state(app, make_user):
    client, user_id = make_user("Alice Smith")
    first, second, third = _notify(app, user_id, count=3)

    listing = client.get(f"{API}/notifications").get_json()
    assert listing["total"] == 3
    assert listing["unreadCount"] == 3
    assert [n["id"] for n in listing["items"]] == [third, second, first]

    read = client.patch(f"{API}/notifications/{first}/read")
    assert read.status_code == 200
    assert read.get_json()["notification"]["is_read"] is True
    assert read.get_json()["notification"]["read_at"] is not None

    unread = client.get(f"{API}/notifications?isRead=false").get_json()
    assert unread["total"] == 2
    assert unread["unreadCount"] == 2
    assert client.get(f"{API}/notifications?isRead=true").get_json()["total"] == 1

    marked = client.patch(f"{API}/notifications/mark-all-read")
    assert marked.get_json()["updated"] == 2
    assert client.get(f"{API}/notifications").get_json()["unreadCount"] == 0


def test_only_recipient_can_touch_notification(app, make_user):
    alice, alice_id = make_user("Alice Smith")
    bob, _ = make_user("Bob Jones")
    (notification_id,) = _notify(app, alice_id)

    assert bob.patch(f"{API}/notifications/{notification_id}/read").status_code == 404
    assert bob.delete(f"{API}/notifications/{notification_id}").status_code == 404
    assert alice.delete(f"{API}/notifications/{notification_id}").status_code == 200
    assert alice.get(f"{API}/notifications").get_json()["total"] == 0


def test_expired_notifications_are_hidden_and_purged(app, make_user):
    client, user_id = make_user("Alice Smith")
    _notify(app, user_id, expires_at=utcnow() - timedelta(minutes=1))
    (live,) = _notify(app, user_id, expires_at=utcnow() + timedelta(days=1))
    (forever,) = _notify(app, user_id)

    listing = client.get(f"{API}/notifications").get_json()
    assert sorted(n["id"] for n in listing["items"]) == sorted([live, forever])
    assert listing["unreadCount"] == 2

    with app.app_context():
        assert NotificationService.purge_expired() == 1
        assert Notification.query.count() == 2


def test_broadcast_reaches_every_active_user(app, make_user, notifications):
    admin, admin_id = make_user("Admin User", admin=True)
    student, student_id = make_user("Sam Student")

    assert student.post(f"{API}/notifications/broadcast", json={"title": "Hi", "message": "x"}).status_code == 403
    assert admin.post(f"{API}/notifications/broadcast", json={"title": "Hi"}).status_code == 400

    response = admin.post(
        f"{API}/notifications/broadcast",
        json={"title": "Maintenance", "message": "The platform is down tonight."},
    )
    assert response.status_code == 201
    assert response.get_json()["count"] == 2
    assert notifications(student_id) == [("system", admin_id)]
    assert notifications(admin_id) == [("system", admin_id)]


def test_broadcast_isolates_single_failures(app, make_user, monkeypatch):
    _, alice_id = make_user("Alice Smith")
    _, bob_id = make_user("Bob Jones")
    original = NotificationService.notify_system_update

    def failing_for_alice(user_id, message, admin_id=None, title="System Update"):
        if user_id == alice_id:
            raise RuntimeError("mail server down")
        return original(user_id, message, admin_id=admin_id, title=title)

    monkeypatch.setattr(NotificationService, "notify_system_update", staticmethod(failing_for_alice))
    with app.app_context():
        assert NotificationService.broadcast_to_all_users("Hello", "World") == 1
        assert Notification.query.filter_by(recipient_id=bob_id).count() == 1


def test_create_notification_validates_enums(app, make_user):
    _, user_id = make_user("Alice Smith")
    with app.app_context():
        with pytest.raises(BadRequestError):
            NotificationService.create_notification(user_id, "carrier_pigeon", "Title", "Body")
        with pytest.raises(BadRequestError):
            NotificationService.create_notification(user_id, "system", "Title", "Body", priority="urgent")
        with pytest.raises(BadRequestError):
            NotificationService.create_notification(
                user_id, "system", "Title", "Body", related_model="Tractor", related_id=1
            )


def test_long_text_is_truncated(app, make_user):
    _, user_id = make_user("Alice Smith")
    with app.app_context():
        notification = NotificationService.create_notification(user_id, "system", "T" * 300, "M" * 900)
        assert len(notification.title) == 200
        assert len(notification.message) == 500


def test_side_effect_failure_does_not_fail_primary_action(app, make_user, make_course, upload, monkeypatch):
    alice, _ = make_user("Alice Smith")
    bob, _ = make_user("Bob Jones")
    resource_id = upload(alice, make_course()).get_json()["resource"]["id"]

    def broken(*args, **kwargs):
        raise RuntimeError("notification store unavailable")

    monkeypatch.setattr(NotificationService, "notify_resource_liked", staticmethod(broken))
    response = bob.post(f"{API}/resources/{resource_id}/like")
    assert response.status_code == 200
    assert response.get_json()["likes_count"] == 1


def test_study_group_message_notification(app, make_user, make_course):
    alice, alice_id = make_user("Alice Smith")
    _, bob_id = make_user("Bob Jones")
    group_id = alice.post(
        f"{API}/study-groups",
        json={"title": "Exam prep", "description": "Past papers together", "course": make_course()},
    ).get_json()["studyGroup"]["id"]

    with app.app_context():
        notification = NotificationService.notify_study_group_message(
            group_id, "Exam prep", bob_id, alice_id, "Alice Smith"
        )
        assert notification.message == 'Alice Smith sent a message in "Exam prep".'
        assert notification.related_model == "StudyGroup"
        assert notification.related_id == group_id
        assert notification.priority == "medium"
