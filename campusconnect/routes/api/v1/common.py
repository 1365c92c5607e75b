"""Request parsing and JSON shapes shared by the v1 API blueprints."""

from flask import current_app, request
from flask_login import current_user


def page_args():
    page = request.args.get("page", default=1, type=int) or 1
    per_page = request.args.get("limit", default=current_app.config["DEFAULT_PAGE_SIZE"], type=int)
    per_page = per_page or current_app.config["DEFAULT_PAGE_SIZE"]
    return max(page, 1), max(1, min(per_page, current_app.config["MAX_PAGE_SIZE"]))


def paginated(pagination, serialize, **extra):
    body = {
        "items": [serialize(item) for item in pagination.items],
        "total": pagination.total,
        "numOfPages": pagination.pages,
        "currentPage": pagination.page,
    }
    body.update(extra)
    return body


def iso(value):
    return value.isoformat() if value else None


def user_summary(user):
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "profile_picture": user.profile_picture or None}


def user_data(user):
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "bio": user.bio,
        "interests": user.interests or [],
        "university": user.university,
        "major": user.major,
        "year": user.year,
        "profile_picture": user.profile_picture or None,
        "contribution_count": user.contribution_count,
        "achievements": user.achievement_ids or [],
        "created_at": iso(user.created_at),
    }


def public_profile(user):
    data = user_data(user)
    data.pop("email")
    return data


def course_summary(course):
    if course is None:
        return None
    return {"id": course.id, "name": course.name, "code": course.code}


def course_data(course):
    return {
        "id": course.id,
        "name": course.name,
        "code": course.code,
        "description": course.description,
        "university": course.university,
        "department": course.department,
        "semester": course.semester,
        "year": course.year,
        "instructor": course.instructor,
        "credits": course.credits,
        "is_active": course.is_active,
        "enrolled_count": len(course.enrolled_students),
    }


def comment_data(comment):
    return {
        "id": comment.id,
        "user": user_summary(comment.user),
        "text": comment.text,
        "created_at": iso(comment.created_at),
    }


def resource_data(resource, viewer=None, with_comments=False):
    data = {
        "id": resource.id,
        "title": resource.title,
        "description": resource.description,
        "type": resource.type,
        "course": course_summary(resource.course),
        "uploaded_by": user_summary(resource.uploaded_by),
        "file_url": resource.file_url,
        "file_name": resource.file_name,
        "file_size": resource.file_size,
        "file_type": resource.file_type,
        "is_pinned": resource.is_pinned,
        "tags": resource.tags or [],
        "download_count": resource.download_count,
        "is_approved": resource.is_approved,
        "likes_count": len(resource.likes),
        "comments_count": len(resource.comments),
        "created_at": iso(resource.created_at),
    }
    if viewer is not None and viewer.is_authenticated:
        data["is_liked"] = any(user.id == viewer.id for user in resource.likes)
    if with_comments:
        data["comments"] = [comment_data(comment) for comment in resource.comments]
    return data


def request_data(resource_request, viewer=None, with_comments=False):
    data = {
        "id": resource_request.id,
        "title": resource_request.title,
        "description": resource_request.description,
        "course": course_summary(resource_request.course),
        "requested_by": user_summary(resource_request.requested_by),
        "resource_type": resource_request.resource_type,
        "priority": resource_request.priority,
        "deadline": iso(resource_request.deadline),
        "tags": resource_request.tags or [],
        "status": resource_request.status,
        "fulfilled_by": user_summary(resource_request.fulfilled_by),
        "fulfilled_resource": resource_request.fulfilled_resource_id,
        "upvotes_count": len(resource_request.upvotes),
        "comments_count": len(resource_request.comments),
        "created_at": iso(resource_request.created_at),
    }
    if viewer is not None and viewer.is_authenticated:
        data["has_upvoted"] = any(user.id == viewer.id for user in resource_request.upvotes)
    if with_comments:
        data["comments"] = [comment_data(comment) for comment in resource_request.comments]
    return data


def study_group_data(group):
    return {
        "id": group.id,
        "title": group.title,
        "description": group.description,
        "course": course_summary(group.course),
        "created_by": user_summary(group.created_by),
        "max_members": group.max_members,
        "meeting_type": group.meeting_type,
        "location": group.location,
        "meeting_time": group.meeting_time,
        "tags": group.tags or [],
        "status": group.status,
        "contact_info": group.contact_info,
        "is_active": group.is_active,
        "members": [
            {"user": user_summary(member.user), "joined_at": iso(member.joined_at)} for member in group.members
        ],
        "members_count": len(group.members),
        "created_at": iso(group.created_at),
    }


def notification_data(notification):
    return {
        "id": notification.id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "sender": user_summary(notification.sender),
        "related_model": notification.related_model,
        "related_id": notification.related_id,
        "is_read": notification.is_read,
        "read_at": iso(notification.read_at),
        "priority": notification.priority,
        "expires_at": iso(notification.expires_at),
        "created_at": iso(notification.created_at),
    }


def achievement_data(achievement):
    return {
        "id": achievement.id,
        "name": achievement.name,
        "description": achievement.description,
        "icon": achievement.icon,
        "type": achievement.type,
        "criteria": {"count": achievement.criteria_count, "timeframe": achievement.criteria_timeframe},
        "points": achievement.points,
        "rarity": achievement.rarity,
    }


def user_achievement_data(user_achievement):
    return {
        "id": user_achievement.id,
        "achievement": achievement_data(user_achievement.achievement),
        "earned_at": iso(user_achievement.earned_at),
        "progress": user_achievement.progress,
    }


def actor():
    """The logged-in ``User`` itself rather than the ``current_user`` proxy."""
    return current_user._get_current_object()
