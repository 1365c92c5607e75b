import logging

from campusconnect.extensions import db
from campusconnect.models import User, UserAchievement
from campusconnect.services import AchievementService

from conftest import API


def test_count_crossing_two_thresholds_awards_both(app, make_user, make_achievement, notifications):
    _, user_id = make_user("Alice Smith")
    first = make_achievement("First Upload", "upload", 1)
    tenth = make_achievement("Helpful Contributor", "upload", 10)
    make_achievement("Prolific", "upload", 50)

    with app.app_context():
        awarded = AchievementService.check_and_award(user_id, "upload", 10)
        assert sorted(awarded) == sorted([first, tenth])
        assert UserAchievement.query.filter_by(user_id=user_id).count() == 2
        assert sorted(db.session.get(User, user_id).achievement_ids) == sorted([first, tenth])

    assert notifications(user_id, type="achievement_earned") == [
        ("achievement_earned", None),
        ("achievement_earned", None),
    ]


def test_repeat_call_awards_nothing_new(app, make_user, make_achievement, notifications):
    _, user_id = make_user("Alice Smith")
    make_achievement("First Upload", "upload", 1)

    with app.app_context():
        assert len(AchievementService.check_and_award(user_id, "upload", 1)) == 1
        assert AchievementService.check_and_award(user_id, "upload", 5) == []
    assert len(notifications(user_id, type="achievement_earned")) == 1


def test_duplicate_award_is_a_benign_no_op(app, make_user, make_achievement, notifications, monkeypatch, caplog):
    _, user_id = make_user("Alice Smith")
    achievement_id = make_achievement("First Upload", "upload", 1)

    with app.app_context():
        AchievementService.check_and_award(user_id, "upload", 1)

        # Simulate a concurrent caller that read the earned set before the first award landed.
        monkeypatch.setattr(AchievementService, "_earned_achievement_ids", staticmethod(lambda _user_id: set()))
        with caplog.at_level(logging.INFO):
            assert AchievementService.check_and_award(user_id, "upload", 1) == []

        assert UserAchievement.query.filter_by(user_id=user_id, achievement_id=achievement_id).count() == 1
        assert db.session.get(User, user_id).achievement_ids == [achievement_id]
    assert len(notifications(user_id, type="achievement_earned")) == 1
    assert "already holds achievement" in caplog.text


def test_award_failure_does_not_stop_later_awards(app, make_user, make_achievement, monkeypatch):
    _, user_id = make_user("Alice Smith")
    broken = make_achievement("First Upload", "upload", 1)
    working = make_achievement("Helpful Contributor", "upload", 2)
    original = AchievementService._award

    def flaky_award(uid, achievement_id, name, count):
        if achievement_id == broken:
            raise RuntimeError("database hiccup")
        return original(uid, achievement_id, name, count)

    monkeypatch.setattr(AchievementService, "_award", staticmethod(flaky_award))
    with app.app_context():
        assert AchievementService.check_and_award(user_id, "upload", 2) == [working]


def test_inactive_achievements_are_not_awarded(app, make_user, make_achievement):
    admin, _ = make_user("Admin User", admin=True)
    _, user_id = make_user("Alice Smith")
    achievement_id = make_achievement("First Upload", "upload", 1)
    assert admin.delete(f"{API}/achievements/{achievement_id}").status_code == 200

    with app.app_context():
        assert AchievementService.check_and_award(user_id, "upload", 1) == []


def test_upload_awards_first_upload_badge(app, make_user, make_course, make_achievement, upload):
    alice, _ = make_user("Alice Smith")
    make_achievement("First Upload", "upload", 1, points=10)
    make_achievement("Study Group Leader", "study_group", 1, points=15)

    upload(alice, make_course())

    mine = alice.get(f"{API}/achievements/my-achievements").get_json()
    assert [a["achievement"]["name"] for a in mine["achievements"]] == ["First Upload"]
    assert mine["totalPoints"] == 10
    assert mine["totalAchievements"] == 1
    assert mine["achievements"][0]["progress"] == 1


def test_like_award_goes_to_owner(app, make_user, make_course, make_achievement, upload):
    alice, alice_id = make_user("Alice Smith")
    bob, _ = make_user("Bob Jones")
    make_achievement("First Fan", "like", 1)
    resource_id = upload(alice, make_course()).get_json()["resource"]["id"]

    bob.post(f"{API}/resources/{resource_id}/like")

    theirs = bob.get(f"{API}/achievements/user/{alice_id}").get_json()
    assert [a["achievement"]["name"] for a in theirs["achievements"]] == ["First Fan"]
    assert bob.get(f"{API}/achievements/my-achievements").get_json()["totalAchievements"] == 0


def test_catalogue_admin_crud(app, make_user):
    admin, _ = make_user("Admin User", admin=True)
    student, _ = make_user("Sam Student")
    payload = {
        "name": "Bookworm",
        "description": "Download 5 resources",
        "type": "download",
        "criteria": {"count": 5},
        "points": 20,
        "rarity": "rare",
    }

    assert student.post(f"{API}/achievements", json=payload).status_code == 403
    assert admin.post(f"{API}/achievements", json={**payload, "type": "sleeping"}).status_code == 400

    created = admin.post(f"{API}/achievements", json=payload)
    assert created.status_code == 201
    achievement = created.get_json()["achievement"]
    assert achievement["criteria"] == {"count": 5, "timeframe": "all-time"}

    updated = admin.patch(f"{API}/achievements/{achievement['id']}", json={"points": 25})
    assert updated.get_json()["achievement"]["points"] == 25

    catalogue = app.test_client().get(f"{API}/achievements").get_json()
    assert [a["name"] for a in catalogue["achievements"]] == ["Bookworm"]

    assert admin.delete(f"{API}/achievements/{achievement['id']}").status_code == 200
    assert app.test_client().get(f"{API}/achievements").get_json()["count"] == 0


def test_catalogue_orders_by_rarity_then_points(app, make_achievement):
    make_achievement("Legend", "special", 1, points=100, rarity="legendary")
    make_achievement("Starter", "upload", 1, points=5, rarity="common")
    make_achievement("Regular", "upload", 5, points=20, rarity="common")

    names = [a["name"] for a in app.test_client().get(f"{API}/achievements").get_json()["achievements"]]
    assert names == ["Starter", "Regular", "Legend"]


def test_points_must_be_an_integer(app, make_user):
    admin, _ = make_user("Admin User", admin=True)
    payload = {"name": "Bookworm", "description": "Download 5 resources", "type": "download", "criteria": {"count": 5}}

    assert admin.post(f"{API}/achievements", json={**payload, "points": "lots"}).status_code == 400
    assert admin.post(f"{API}/achievements", json={**payload, "points": -5}).status_code == 400
    assert app.test_client().get(f"{API}/achievements").get_json()["count"] == 0

    created = admin.post(f"{API}/achievements", json={**payload, "points": "15"})
    assert created.get_json()["achievement"]["points"] == 15
    achievement_id = created.get_json()["achievement"]["id"]
    assert admin.patch(f"{API}/achievements/{achievement_id}", json={"points": "many"}).status_code == 400

    catalogue = app.test_client().get(f"{API}/achievements")
    assert catalogue.status_code == 200
    assert [a["points"] for a in catalogue.get_json()["achievements"]] == [15]
