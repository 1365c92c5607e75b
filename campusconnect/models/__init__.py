from campusconnect.models.achievement import Achievement, UserAchievement
from campusconnect.models.course import Course, course_enrollments
from campusconnect.models.notification import Notification
from campusconnect.models.resource import Resource, ResourceComment, resource_likes
from campusconnect.models.resource_request import RequestComment, ResourceRequest, request_upvotes
from campusconnect.models.study_group import StudyGroup, StudyGroupMember
from campusconnect.models.user import Bookmark, User

__all__ = [
    "User",
    "Bookmark",
    "Course",
    "course_enrollments",
    "Resource",
    "ResourceComment",
    "resource_likes",
    "ResourceRequest",
    "RequestComment",
    "request_upvotes",
    "StudyGroup",
    "StudyGroupMember",
    "Achievement",
    "UserAchievement",
    "Notification",
]
