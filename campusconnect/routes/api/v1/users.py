from flask import Blueprint, jsonify, request
from flask_login import login_required

from campusconnect.decorators import admin_required
from campusconnect.routes.api.v1.common import (
    actor,
    page_args,
    paginated,
    public_profile,
    resource_data,
    study_group_data,
    user_data,
)
from campusconnect.services import AuthService, UserService

api_user_bp = Blueprint("api_user", __name__)


def _bookmark_data(bookmark, target):
    detail = resource_data(target) if bookmark.target_type == "Resource" else study_group_data(target)
    return {"resource_type": bookmark.target_type, "resource_id": bookmark.target_id, "item": detail}


@api_user_bp.get("")
@login_required
@admin_required
def list_users():
    page, per_page = page_args()
    users = UserService.list_users(request.args, page=page, per_page=per_page)
    return jsonify(paginated(users, user_data))


@api_user_bp.get("/<int:user_id>")
@login_required
def get_user(user_id):
    user = UserService.get_user_for(actor(), user_id)
    return jsonify({"user": user_data(user)})


@api_user_bp.get("/profile/<int:user_id>")
@login_required
def get_profile(user_id):
    user = UserService.get_user(user_id)
    return jsonify({"user": public_profile(user)})


@api_user_bp.patch("/me")
@login_required
def update_me():
    payload = request.get_json(silent=True) or {}
    user = UserService.update_profile(actor(), payload)
    return jsonify({"user": user_data(user)})


@api_user_bp.patch("/me/password")
@login_required
def update_password():
    payload = request.get_json(silent=True) or {}
    AuthService.change_password(actor(), payload.get("oldPassword"), payload.get("newPassword"))
    return jsonify({"msg": "Success! Password Updated."})


@api_user_bp.patch("/me/profile-picture")
@login_required
def update_profile_picture():
    user = UserService.update_profile_picture(actor(), request.files.get("profile_picture"))
    return jsonify({"user": user_data(user)})


@api_user_bp.get("/bookmarks")
@login_required
def list_bookmarks():
    pairs = UserService.resolved_bookmarks(actor())
    return jsonify({"bookmarks": [_bookmark_data(bookmark, target) for bookmark, target in pairs]})


@api_user_bp.post("/bookmarks")
@login_required
def add_bookmark():
    payload = request.get_json(silent=True) or {}
    UserService.add_bookmark(actor(), payload)
    return jsonify({"msg": "Bookmark added successfully"}), 201


@api_user_bp.delete("/bookmarks")
@login_required
def remove_bookmark():
    payload = request.get_json(silent=True) or {}
    UserService.remove_bookmark(actor(), payload)
    return jsonify({"msg": "Bookmark removed successfully"})
