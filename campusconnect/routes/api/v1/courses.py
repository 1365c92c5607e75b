from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from campusconnect.decorators import admin_required
from campusconnect.routes.api.v1.common import actor, course_data, page_args, paginated
from campusconnect.services import CourseService

api_course_bp = Blueprint("api_course", __name__)


@api_course_bp.get("")
def list_courses():
    page, per_page = page_args()
    courses = CourseService.list_courses(request.args, page=page, per_page=per_page)
    return jsonify(paginated(courses, course_data))


@api_course_bp.get("/search")
def search_courses():
    courses = CourseService.search_courses(request.args.get("q", "").strip())
    return jsonify({"courses": [course_data(course) for course in courses]})


@api_course_bp.get("/my-courses")
@login_required
def my_courses():
    courses = CourseService.courses_for_user(current_user.id)
    return jsonify({"courses": [course_data(course) for course in courses], "count": len(courses)})


@api_course_bp.get("/<int:course_id>")
def get_course(course_id):
    return jsonify({"course": course_data(CourseService.get_course(course_id))})


@api_course_bp.post("")
@login_required
@admin_required
def create_course():
    payload = request.get_json(silent=True) or {}
    course = CourseService.create_course(payload)
    return jsonify({"course": course_data(course)}), 201


@api_course_bp.patch("/<int:course_id>")
@login_required
@admin_required
def update_course(course_id):
    payload = request.get_json(silent=True) or {}
    course = CourseService.update_course(course_id, payload)
    return jsonify({"course": course_data(course)})


@api_course_bp.delete("/<int:course_id>")
@login_required
@admin_required
def delete_course(course_id):
    CourseService.delete_course(course_id)
    return jsonify({"msg": "Success! Course removed."})


@api_course_bp.post("/<int:course_id>/enroll")
@login_required
def enroll(course_id):
    course = CourseService.enroll(course_id, actor())
    return jsonify({"msg": "Successfully enrolled in course", "course": course_data(course)})


@api_course_bp.delete("/<int:course_id>/unenroll")
@login_required
def unenroll(course_id):
    CourseService.unenroll(course_id, actor())
    return jsonify({"msg": "Successfully unenrolled from course"})
