from campusconnect.services.achievement_service import AchievementService
from campusconnect.services.auth_service import AuthService
from campusconnect.services.course_service import CourseService
from campusconnect.services.dashboard_service import DashboardService
from campusconnect.services.media_service import MediaService
from campusconnect.services.notification_service import NotificationService
from campusconnect.services.request_service import RequestService
from campusconnect.services.resource_service import ResourceService
from campusconnect.services.study_group_service import StudyGroupService
from campusconnect.services.user_service import UserService

__all__ = [
    "AchievementService",
    "AuthService",
    "CourseService",
    "DashboardService",
    "MediaService",
    "NotificationService",
    "RequestService",
    "ResourceService",
    "StudyGroupService",
    "UserService",
]
