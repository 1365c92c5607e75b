from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from campusconnect.decorators import admin_required
from campusconnect.extensions import cache
from campusconnect.routes.api.v1.common import achievement_data, user_achievement_data
from campusconnect.services import AchievementService, UserService
from campusconnect.services.achievement_service import CATALOGUE_CACHE_KEY

api_achievement_bp = Blueprint("api_achievement", __name__)


def _earned_payload(user_id):
    earned = AchievementService.for_user(user_id)
    return {
        "achievements": [user_achievement_data(item) for item in earned],
        "totalPoints": sum(item.achievement.points for item in earned),
        "totalAchievements": len(earned),
    }


@api_achievement_bp.get("")
def list_achievements():
    catalogue = cache.get(CATALOGUE_CACHE_KEY)
    if catalogue is None:
        catalogue = [achievement_data(a) for a in AchievementService.list_active()]
        cache.set(CATALOGUE_CACHE_KEY, catalogue, timeout=current_app.config["ACHIEVEMENT_CACHE_TIMEOUT"])
    return jsonify({"achievements": catalogue, "count": len(catalogue)})


@api_achievement_bp.get("/my-achievements")
@login_required
def my_achievements():
    return jsonify(_earned_payload(current_user.id))


@api_achievement_bp.get("/user/<int:user_id>")
@login_required
def user_achievements(user_id):
    user = UserService.get_user(user_id)
    return jsonify(_earned_payload(user.id))


@api_achievement_bp.post("")
@login_required
@admin_required
def create_achievement():
    payload = request.get_json(silent=True) or {}
    achievement = AchievementService.create_achievement(payload)
    return jsonify({"achievement": achievement_data(achievement)}), 201


@api_achievement_bp.patch("/<int:achievement_id>")
@login_required
@admin_required
def update_achievement(achievement_id):
    payload = request.get_json(silent=True) or {}
    achievement = AchievementService.update_achievement(achievement_id, payload)
    return jsonify({"achievement": achievement_data(achievement)})


@api_achievement_bp.delete("/<int:achievement_id>")
@login_required
@admin_required
def delete_achievement(achievement_id):
    AchievementService.delete_achievement(achievement_id)
    return jsonify({"msg": "Success! Achievement removed."})
