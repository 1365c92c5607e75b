from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from campusconnect.extensions import limiter
from campusconnect.routes.api.v1.common import user_data
from campusconnect.services import AuthService

api_auth_bp = Blueprint("api_auth", __name__)


@api_auth_bp.post("/register")
@limiter.limit("10 per hour")
def api_register():
    payload = request.get_json(silent=True) or {}
    user = AuthService.register_user(
        name=payload.get("name", ""),
        email=payload.get("email", ""),
        password=payload.get("password", ""),
        university=payload.get("university", ""),
        major=payload.get("major"),
        year=payload.get("year"),
    )
    login_user(user)
    return jsonify({"user": user_data(user)}), 201


@api_auth_bp.post("/login")
@limiter.limit("20 per minute")
def api_login():
    payload = request.get_json(silent=True) or {}
    user = AuthService.authenticate_user(payload.get("email", ""), payload.get("password", ""))
    login_user(user, remember=bool(payload.get("remember")))
    return jsonify({"user": user_data(user)})


@api_auth_bp.post("/logout")
@login_required
def api_logout():
    logout_user()
    return jsonify({"msg": "User logged out!"})


@api_auth_bp.get("/me")
@login_required
def api_me():
    return jsonify({"user": user_data(current_user)})
