from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from campusconnect.decorators import admin_required
from campusconnect.errors import BadRequestError
from campusconnect.routes.api.v1.common import notification_data, page_args, paginated
from campusconnect.services import NotificationService

api_notification_bp = Blueprint("api_notification", __name__)


@api_notification_bp.get("")
@login_required
def my_notifications():
    page, per_page = page_args()
    is_read = request.args.get("isRead")
    read_filter = None if is_read in (None, "") else is_read.lower() == "true"
    notifications = NotificationService.list_for_user(current_user.id, page=page, per_page=per_page, is_read=read_filter)
    return jsonify(
        paginated(
            notifications,
            notification_data,
            unreadCount=NotificationService.unread_count(current_user.id),
        )
    )


@api_notification_bp.patch("/mark-all-read")
@login_required
def mark_all_read():
    updated = NotificationService.mark_all_read(current_user.id)
    return jsonify({"msg": "All notifications marked as read", "updated": updated})


@api_notification_bp.patch("/<int:notification_id>/read")
@login_required
def mark_read(notification_id):
    notification = NotificationService.mark_as_read(notification_id, current_user.id)
    return jsonify({"msg": "Notification marked as read", "notification": notification_data(notification)})


@api_notification_bp.delete("/<int:notification_id>")
@login_required
def delete_notification(notification_id):
    NotificationService.delete_for_user(notification_id, current_user.id)
    return jsonify({"msg": "Notification deleted"})


@api_notification_bp.post("/broadcast")
@login_required
@admin_required
def broadcast():
    payload = request.get_json(silent=True) or {}
    title = (payload.get("title") or "").strip()
    message = (payload.get("message") or "").strip()
    if not title or not message:
        raise BadRequestError("Please provide title and message")
    delivered = NotificationService.broadcast_to_all_users(title, message, admin_id=current_user.id)
    return jsonify({"msg": f"Notification sent to {delivered} users", "count": delivered}), 201
