from flask import Blueprint, jsonify, request
from flask_login import login_required

from campusconnect.routes.api.v1.common import (
    actor,
    course_summary,
    resource_data,
    study_group_data,
    user_data,
)
from campusconnect.services import DashboardService

api_dashboard_bp = Blueprint("api_dashboard", __name__)


@api_dashboard_bp.get("/stats")
@login_required
def stats():
    result = DashboardService.stats_for(actor())
    body = {"role": result["role"], "stats": result["stats"]}
    if result["role"] == "admin":
        body["recentUsers"] = [user_data(user) for user in result["recent_users"]]
        body["recentResources"] = [resource_data(r) for r in result["recent_resources"]]
    else:
        body["recentResources"] = [resource_data(r) for r in result["recent_resources"]]
        body["recentStudyGroups"] = [study_group_data(group) for group in result["recent_study_groups"]]
        body["bookmarks"] = [
            {
                "resource_type": bookmark.target_type,
                "resource_id": bookmark.target_id,
                "title": target.title,
                "course": course_summary(target.course),
            }
            for bookmark, target in result["bookmarks"]
        ]
    return jsonify(body)


@api_dashboard_bp.get("/resource-stats")
@login_required
def resource_stats():
    result = DashboardService.resource_stats(course_id=request.args.get("courseId"))
    return jsonify(
        {
            "resourcesByType": [{"type": resource_type, "count": count} for resource_type, count in result["by_type"]],
            "mostLiked": [
                {**resource_data(resource), "likes_count": likes} for resource, likes in result["most_liked"]
            ],
            "mostDownloaded": [resource_data(resource) for resource in result["most_downloaded"]],
        }
    )


@api_dashboard_bp.get("/user-activity/<int:user_id>")
@login_required
def user_activity(user_id):
    result = DashboardService.user_activity(actor(), user_id, request.args.get("timeframe"))
    return jsonify(
        {
            "user": {"id": result["user"].id, "name": result["user"].name},
            "timeframe": result["timeframe"],
            "activity": {
                "resourcesUploaded": result["resourcesUploaded"],
                "studyGroupsJoined": result["studyGroupsJoined"],
                "requestsCreated": result["requestsCreated"],
            },
        }
    )
