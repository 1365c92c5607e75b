from campusconnect.extensions import db
from campusconnect.models import StudyGroup

from conftest import API


def _create_group(client, course_id, **overrides):
    payload = {
        "title": "Algorithms study circle",
        "description": "Weekly problem solving before the midterm",
        "course": course_id,
        "max_members": 3,
        "meeting_type": "online",
    }
    payload.update(overrides)
    return client.post(f"{API}/study-groups", json=payload)


def test_creator_is_first_member(app, make_user, make_course):
    alice, alice_id = make_user("Alice Smith")
    response = _create_group(alice, make_course())
    assert response.status_code == 201
    group = response.get_json()["studyGroup"]
    assert group["created_by"]["id"] == alice_id
    assert [m["user"]["id"] for m in group["members"]] == [alice_id]
    assert group["status"] == "open"


def test_join_fills_group_and_notifies_creator(app, make_user, make_course, notifications):
    alice, alice_id = make_user("Alice Smith")
    bob, bob_id = make_user("Bob Jones")
    carol, _ = make_user("Carol White")
    dave, _ = make_user("Dave Black")
    group_id = _create_group(alice, make_course()).get_json()["studyGroup"]["id"]

    joined = bob.post(f"{API}/study-groups/{group_id}/join")
    assert joined.status_code == 200
    assert joined.get_json()["studyGroup"]["status"] == "open"
    assert notifications(alice_id, type="study_group_joined") == [("study_group_joined", bob_id)]

    assert bob.post(f"{API}/study-groups/{group_id}/join").status_code == 400
    assert carol.post(f"{API}/study-groups/{group_id}/join").get_json()["studyGroup"]["status"] == "full"

    full = dave.post(f"{API}/study-groups/{group_id}/join")
    assert full.status_code == 400
    assert full.get_json() == {"msg": "Study group is full"}

    carol.delete(f"{API}/study-groups/{group_id}/leave")
    assert dave.post(f"{API}/study-groups/{group_id}/join").status_code == 200


def test_sole_member_leaving_closes_group(app, make_user, make_course):
    alice, _ = make_user("Alice Smith")
    group_id = _create_group(alice, make_course()).get_json()["studyGroup"]["id"]

    response = alice.delete(f"{API}/study-groups/{group_id}/leave")
    assert response.status_code == 200
    assert response.get_json()["studyGroup"]["status"] == "closed"
    assert response.get_json()["studyGroup"]["is_active"] is False

    with app.app_context():
        group = db.session.get(StudyGroup, group_id)
        assert group.status == "closed"
        assert group.is_active is False
    assert alice.get(f"{API}/study-groups/{group_id}").status_code == 404


def test_creator_leaving_hands_over_to_earliest_member(app, make_user, make_course):
    alice, _ = make_user("Alice Smith")
    bob, bob_id = make_user("Bob Jones")
    carol, _ = make_user("Carol White")
    group_id = _create_group(alice, make_course(), max_members=5).get_json()["studyGroup"]["id"]
    bob.post(f"{API}/study-groups/{group_id}/join")
    carol.post(f"{API}/study-groups/{group_id}/join")

    response = alice.delete(f"{API}/study-groups/{group_id}/leave")
    group = response.get_json()["studyGroup"]
    assert group["created_by"]["id"] == bob_id
    assert group["status"] == "open"
    assert group["members_count"] == 2

    # The new owner can now edit the group; the old one cannot.
    assert alice.patch(f"{API}/study-groups/{group_id}", json={"location": "Library"}).status_code == 403
    assert bob.patch(f"{API}/study-groups/{group_id}", json={"location": "Library"}).status_code == 200


def test_leave_requires_membership(app, make_user, make_course):
    alice, _ = make_user("Alice Smith")
    bob, _ = make_user("Bob Jones")
    group_id = _create_group(alice, make_course()).get_json()["studyGroup"]["id"]
    assert bob.delete(f"{API}/study-groups/{group_id}/leave").status_code == 400


def test_update_recomputes_status(app, make_user, make_course):
    alice, _ = make_user("Alice Smith")
    bob, _ = make_user("Bob Jones")
    group_id = _create_group(alice, make_course()).get_json()["studyGroup"]["id"]
    bob.post(f"{API}/study-groups/{group_id}/join")

    shrunk = alice.patch(f"{API}/study-groups/{group_id}", json={"max_members": 2})
    assert shrunk.get_json()["studyGroup"]["status"] == "full"
    grown = alice.patch(f"{API}/study-groups/{group_id}", json={"max_members": 6})
    assert grown.get_json()["studyGroup"]["status"] == "open"

    assert alice.patch(f"{API}/study-groups/{group_id}", json={"max_members": 30}).status_code == 400
    assert bob.patch(f"{API}/study-groups/{group_id}", json={"title": "Hijacked"}).status_code == 403


def test_delete_by_creator_or_admin(app, make_user, make_course):
    alice, _ = make_user("Alice Smith")
    bob, _ = make_user("Bob Jones")
    admin, _ = make_user("Admin User", admin=True)
    course_id = make_course()
    first = _create_group(alice, course_id).get_json()["studyGroup"]["id"]
    second = _create_group(alice, course_id, title="Second group").get_json()["studyGroup"]["id"]

    assert bob.delete(f"{API}/study-groups/{first}").status_code == 403
    assert alice.delete(f"{API}/study-groups/{first}").status_code == 200
    assert admin.delete(f"{API}/study-groups/{second}").status_code == 200
    assert app.test_client().get(f"{API}/study-groups").get_json()["total"] == 0
    with app.app_context():
        assert StudyGroup.query.count() == 2


def test_listing_search_and_my_groups(app, make_user, make_course):
    alice, _ = make_user("Alice Smith")
    bob, _ = make_user("Bob Jones")
    course_id = make_course()
    _create_group(alice, course_id)
    _create_group(alice, course_id, title="Calculus crammers", description="Integrals every night")
    bob_group = _create_group(bob, course_id, title="Bob's solo group", max_members=2).get_json()["studyGroup"]
    alice.post(f"{API}/study-groups/{bob_group['id']}/join")

    client = app.test_client()
    assert client.get(f"{API}/study-groups").get_json()["total"] == 2
    assert client.get(f"{API}/study-groups?status=full").get_json()["total"] == 1
    assert client.get(f"{API}/study-groups?status=all").get_json()["total"] == 3
    found = client.get(f"{API}/study-groups/search?q=integrals").get_json()["studyGroups"]
    assert [g["title"] for g in found] == ["Calculus crammers"]
    assert alice.get(f"{API}/study-groups/my-groups").get_json()["count"] == 3


def test_joining_inactive_group_is_rejected(app, make_user, make_course):
    alice, _ = make_user("Alice Smith")
    bob, _ = make_user("Bob Jones")
    group_id = _create_group(alice, make_course()).get_json()["studyGroup"]["id"]
    alice.delete(f"{API}/study-groups/{group_id}")

    response = bob.post(f"{API}/study-groups/{group_id}/join")
    assert response.status_code == 400
    assert response.get_json() == {"msg": "Study group is not active"}
    assert bob.post(f"{API}/study-groups/9999/join").status_code == 404
