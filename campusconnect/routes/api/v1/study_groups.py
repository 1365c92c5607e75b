from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from campusconnect.routes.api.v1.common import actor, page_args, paginated, study_group_data
from campusconnect.services import StudyGroupService

api_study_group_bp = Blueprint("api_study_group", __name__)


@api_study_group_bp.get("")
def list_groups():
    page, per_page = page_args()
    groups = StudyGroupService.list_groups(request.args, page=page, per_page=per_page)
    return jsonify(paginated(groups, study_group_data))


@api_study_group_bp.get("/search")
def search_groups():
    groups = StudyGroupService.search_groups(request.args.get("q", "").strip())
    return jsonify({"studyGroups": [study_group_data(group) for group in groups]})


@api_study_group_bp.get("/my-groups")
@login_required
def my_groups():
    groups = StudyGroupService.groups_for_user(current_user.id)
    return jsonify({"studyGroups": [study_group_data(group) for group in groups], "count": len(groups)})


@api_study_group_bp.get("/<int:group_id>")
def get_group(group_id):
    return jsonify({"studyGroup": study_group_data(StudyGroupService.get_group(group_id))})


@api_study_group_bp.post("")
@login_required
def create_group():
    payload = request.get_json(silent=True) or {}
    group = StudyGroupService.create_group(actor(), payload)
    return jsonify({"studyGroup": study_group_data(group)}), 201


@api_study_group_bp.patch("/<int:group_id>")
@login_required
def update_group(group_id):
    payload = request.get_json(silent=True) or {}
    group = StudyGroupService.update_group(actor(), group_id, payload)
    return jsonify({"studyGroup": study_group_data(group)})


@api_study_group_bp.delete("/<int:group_id>")
@login_required
def delete_group(group_id):
    StudyGroupService.delete_group(actor(), group_id)
    return jsonify({"msg": "Success! Study group removed."})


@api_study_group_bp.post("/<int:group_id>/join")
@login_required
def join_group(group_id):
    group = StudyGroupService.join(actor(), group_id)
    return jsonify({"msg": "Successfully joined study group", "studyGroup": study_group_data(group)})


@api_study_group_bp.delete("/<int:group_id>/leave")
@login_required
def leave_group(group_id):
    group = StudyGroupService.leave(actor(), group_id)
    return jsonify({"msg": "Successfully left study group", "studyGroup": study_group_data(group)})
