from campusconnect.extensions import db
from campusconnect.models import Course

from conftest import API

COURSE = {
    "name": "Data Structures",
    "code": "CS201",
    "university": "State University",
    "department": "Computer Science",
    "credits": 4,
    "year": 2024,
}


def test_admin_manages_courses(app, make_user):
    admin, _ = make_user("Admin User", admin=True)

    created = admin.post(f"{API}/courses", json=COURSE)
    assert created.status_code == 201
    course_id = created.get_json()["course"]["id"]

    updated = admin.patch(f"{API}/courses/{course_id}", json={"instructor": "Dr. Knuth"})
    assert updated.status_code == 200
    assert updated.get_json()["course"]["instructor"] == "Dr. Knuth"
    assert updated.get_json()["course"]["name"] == "Data Structures"


def test_students_cannot_create_courses(app, make_user):
    student, _ = make_user("Sam Student")
    response = student.post(f"{API}/courses", json=COURSE)
    assert response.status_code == 403
    assert response.get_json() == {"msg": "Unauthorized to access this route"}


def test_duplicate_code_per_university_is_rejected(app, make_user):
    admin, _ = make_user("Admin User", admin=True)
    assert admin.post(f"{API}/courses", json=COURSE).status_code == 201

    duplicate = admin.post(f"{API}/courses", json=COURSE)
    assert duplicate.status_code == 400

    elsewhere = admin.post(f"{API}/courses", json={**COURSE, "university": "Tech Institute"})
    assert elsewhere.status_code == 201


def test_course_field_bounds(app, make_user):
    admin, _ = make_user("Admin User", admin=True)
    assert admin.post(f"{API}/courses", json={**COURSE, "credits": 9}).status_code == 400
    assert admin.post(f"{API}/courses", json={**COURSE, "year": 2019}).status_code == 400
    assert admin.post(f"{API}/courses", json={"name": "Only a name"}).status_code == 400


def test_soft_deleted_course_is_hidden_but_kept(app, make_user, make_course):
    admin, _ = make_user("Admin User", admin=True)
    course_id = make_course()

    assert admin.delete(f"{API}/courses/{course_id}").status_code == 200

    listing = app.test_client().get(f"{API}/courses").get_json()
    assert listing["total"] == 0
    assert app.test_client().get(f"{API}/courses/{course_id}").status_code == 404
    with app.app_context():
        course = db.session.get(Course, course_id)
        assert course is not None
        assert course.is_active is False


def test_list_search_and_pagination(app, make_course):
    make_course(code="CS101", name="Intro to Computing")
    make_course(code="MA101", name="Calculus I")
    make_course(code="CS102", name="Algorithms")
    client = app.test_client()

    page = client.get(f"{API}/courses?limit=2&page=1").get_json()
    assert page["total"] == 3
    assert page["numOfPages"] == 2
    assert page["currentPage"] == 1
    assert [c["name"] for c in page["items"]] == ["Algorithms", "Calculus I"]

    found = client.get(f"{API}/courses/search?q=calc").get_json()["courses"]
    assert [c["code"] for c in found] == ["MA101"]

    assert client.get(f"{API}/courses/search").status_code == 400


def test_enroll_and_unenroll(app, make_user, make_course, notifications):
    client, user_id = make_user("Erin Green")
    course_id = make_course()

    enrolled = client.post(f"{API}/courses/{course_id}/enroll")
    assert enrolled.status_code == 200
    assert enrolled.get_json()["course"]["enrolled_count"] == 1
    assert notifications(user_id) == [("system", None)]

    assert client.post(f"{API}/courses/{course_id}/enroll").status_code == 400

    mine = client.get(f"{API}/courses/my-courses").get_json()
    assert mine["count"] == 1

    assert client.delete(f"{API}/courses/{course_id}/unenroll").status_code == 200
    assert client.get(f"{API}/courses/my-courses").get_json()["count"] == 0
