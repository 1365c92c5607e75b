from datetime import timedelta

from sqlalchemy import func

from campusconnect.extensions import db
from campusconnect.models import (
    Course,
    Resource,
    ResourceRequest,
    StudyGroup,
    StudyGroupMember,
    User,
    course_enrollments,
    resource_likes,
)
from campusconnect.models.base import utcnow
from campusconnect.services.helpers import parse_int
from campusconnect.services.user_service import UserService


def _active_resources():
    return Resource.query.filter(Resource.is_active.is_(True))


class DashboardService:
    @staticmethod
    def stats_for(user):
        if user.is_admin:
            return DashboardService.admin_stats()
        return DashboardService.student_stats(user)

    @staticmethod
    def admin_stats():
        since = utcnow() - timedelta(days=30)
        approved = _active_resources().filter(Resource.is_approved.is_(True))
        return {
            "role": "admin",
            "stats": {
                "totalUsers": User.query.filter_by(role="student").count(),
                "totalCourses": Course.query.filter_by(is_active=True).count(),
                "totalResources": approved.count(),
                "totalStudyGroups": StudyGroup.query.filter_by(is_active=True).count(),
                "totalRequests": ResourceRequest.query.count(),
                "newUsersLast30Days": User.query.filter(User.created_at >= since).count(),
                "newResourcesLast30Days": _active_resources().filter(Resource.created_at >= since).count(),
            },
            "recent_users": User.query.order_by(User.created_at.desc(), User.id.desc()).limit(5).all(),
            "recent_resources": approved.order_by(Resource.created_at.desc(), Resource.id.desc()).limit(5).all(),
        }

    @staticmethod
    def student_stats(user):
        enrolled = (
            db.session.query(func.count(course_enrollments.c.course_id))
            .join(Course, Course.id == course_enrollments.c.course_id)
            .filter(course_enrollments.c.user_id == user.id, Course.is_active.is_(True))
            .scalar()
        )
        own_resources = _active_resources().filter(Resource.uploaded_by_id == user.id)
        joined_groups = (
            StudyGroup.query.join(StudyGroupMember, StudyGroupMember.group_id == StudyGroup.id)
            .filter(StudyGroupMember.user_id == user.id, StudyGroup.is_active.is_(True))
        )
        return {
            "role": "student",
            "stats": {
                "enrolledCourses": enrolled,
                "uploadedResources": own_resources.count(),
                "joinedStudyGroups": joined_groups.count(),
                "createdRequests": ResourceRequest.query.filter_by(requested_by_id=user.id, is_active=True).count(),
            },
            "recent_resources": own_resources.order_by(Resource.created_at.desc(), Resource.id.desc()).limit(5).all(),
            "recent_study_groups": joined_groups.order_by(StudyGroup.created_at.desc(), StudyGroup.id.desc())
            .limit(3)
            .all(),
            "bookmarks": UserService.resolved_bookmarks(user, limit=5),
        }

    @staticmethod
    def resource_stats(course_id=None):
        visible = _active_resources().filter(Resource.is_approved.is_(True))
        if course_id not in (None, ""):
            visible = visible.filter(Resource.course_id == parse_int(course_id, "Course ID"))

        by_type = (
            visible.with_entities(Resource.type, func.count(Resource.id))
            .group_by(Resource.type)
            .order_by(func.count(Resource.id).desc(), Resource.type.asc())
            .all()
        )
        like_count = func.count(resource_likes.c.user_id)
        most_liked = (
            visible.outerjoin(resource_likes, resource_likes.c.resource_id == Resource.id)
            .with_entities(Resource, like_count)
            .group_by(Resource.id)
            .order_by(like_count.desc(), Resource.id.asc())
            .limit(10)
            .all()
        )
        most_downloaded = visible.order_by(Resource.download_count.desc(), Resource.id.asc()).limit(10).all()
        return {
            "by_type": [(resource_type, count) for resource_type, count in by_type],
            "most_liked": most_liked,
            "most_downloaded": most_downloaded,
        }

    @staticmethod
    def user_activity(actor, user_id, timeframe=30):
        user = UserService.get_user_for(actor, user_id)
        days = parse_int(timeframe, "Timeframe", minimum=1, maximum=365, default=30)
        since = utcnow() - timedelta(days=days)
        return {
            "user": user,
            "timeframe": days,
            "resourcesUploaded": _active_resources()
            .filter(Resource.uploaded_by_id == user.id, Resource.created_at >= since)
            .count(),
            "studyGroupsJoined": StudyGroupMember.query.filter(
                StudyGroupMember.user_id == user.id, StudyGroupMember.joined_at >= since
            ).count(),
            "requestsCreated": ResourceRequest.query.filter(
                ResourceRequest.requested_by_id == user.id, ResourceRequest.created_at >= since
            ).count(),
        }
