from flask import current_app
from sqlalchemy import String, cast, or_
from sqlalchemy.orm import joinedload

from campusconnect.errors import BadRequestError, UnauthorizedError
from campusconnect.extensions import db
from campusconnect.models import Course, RequestComment, Resource, ResourceComment, User
from campusconnect.models.base import RESOURCE_TYPES
from campusconnect.services.achievement_service import AchievementService
from campusconnect.services.course_service import CourseService
from campusconnect.services.helpers import (
    clean_text,
    get_active_or_404,
    parse_int,
    require_choice,
    split_tags,
    text_search,
)
from campusconnect.services.media_service import MediaService
from campusconnect.services.notification_service import NotificationService, side_effect

SORT_COLUMNS = {
    "createdAt": Resource.created_at,
    "title": Resource.title,
    "downloadCount": Resource.download_count,
}


class ResourceService:
    @staticmethod
    def _visible():
        return Resource.query.options(
            joinedload(Resource.course),
            joinedload(Resource.uploaded_by),
        ).filter(Resource.is_active.is_(True), Resource.is_approved.is_(True))

    @staticmethod
    def _ensure_owner_or_admin(resource, actor, action):
        if resource.uploaded_by_id != actor.id and not actor.is_admin:
            raise UnauthorizedError(f"Not authorized to {action} this resource")

    @staticmethod
    def list_resources(filters, page=1, per_page=20):
        query = ResourceService._visible()
        if filters.get("course"):
            query = query.filter(Resource.course_id == parse_int(filters["course"], "Course"))
        if filters.get("type") and filters["type"] != "all":
            query = query.filter(Resource.type == filters["type"])
        tags = split_tags(filters.get("tags"))
        if tags:
            query = query.filter(or_(*[cast(Resource.tags, String).ilike(f'%"{tag}"%') for tag in tags]))
        if filters.get("search"):
            query = text_search(query, filters["search"], Resource.title, Resource.description, Resource.tags)

        column = SORT_COLUMNS.get(filters.get("sortBy"), Resource.created_at)
        ordered = column.asc() if filters.get("sortOrder") == "asc" else column.desc()
        return query.order_by(Resource.is_pinned.desc(), ordered, Resource.id.desc()).paginate(
            page=page, per_page=per_page, error_out=False
        )

    @staticmethod
    def recent_resources(limit=10):
        return ResourceService._visible().order_by(Resource.created_at.desc(), Resource.id.desc()).limit(limit).all()

    @staticmethod
    def pinned_resources(course_id=None):
        query = ResourceService._visible().filter(Resource.is_pinned.is_(True))
        if course_id:
            query = query.filter(Resource.course_id == parse_int(course_id, "Course"))
        return query.order_by(Resource.created_at.desc(), Resource.id.desc()).all()

    @staticmethod
    def pending_resources(page=1, per_page=20):
        return (
            Resource.query.filter(Resource.is_active.is_(True), Resource.is_approved.is_(False))
            .order_by(Resource.created_at.asc())
            .paginate(page=page, per_page=per_page, error_out=False)
        )

    @staticmethod
    def get_resource(resource_id):
        return get_active_or_404(Resource, resource_id, "resource")

    @staticmethod
    def create_resource(uploader, payload, storage):
        title = clean_text(payload.get("title"), "Title")
        resource_type = payload.get("type")
        if not title:
            raise BadRequestError("Please provide resource title")
        if len(title) > 200:
            raise BadRequestError("Resource title must be at most 200 characters.")
        require_choice(resource_type, RESOURCE_TYPES, "resource type")
        if not storage or not storage.filename:
            raise BadRequestError("Please provide a file")
        if not payload.get("course"):
            raise BadRequestError("Please provide course")
        course = get_active_or_404(Course, parse_int(payload.get("course"), "Course"), "course")

        stored = MediaService.save_resource(storage)
        try:
            resource = Resource(
                title=title,
                description=(clean_text(payload.get("description"), "Description") or None),
                type=resource_type,
                course_id=course.id,
                uploaded_by_id=uploader.id,
                tags=split_tags(payload.get("tags")),
                file_url=stored.url,
                file_name=stored.file_name,
                file_size=stored.file_size,
                file_type=stored.file_type,
                is_approved=current_app.config["RESOURCE_AUTO_APPROVE"],
            )
            db.session.add(resource)
            uploader.contribution_count = User.contribution_count + 1
            db.session.commit()
        except Exception:
            db.session.rollback()
            MediaService.delete(stored.public_id)
            raise

        if resource.is_approved:
            ResourceService._announce(resource, uploader)
        AchievementService.check_and_award(uploader.id, "upload", uploader.contribution_count)
        return resource

    @staticmethod
    def _announce(resource, uploader):
        """Tell the other students enrolled in the course about a visible resource."""
        try:
            recipients = [uid for uid in CourseService.enrolled_student_ids(resource.course_id) if uid != uploader.id]
        except Exception:
            db.session.rollback()
            current_app.logger.exception("Failed to load recipients for resource %s", resource.id)
            return
        resource_id, title, course_name = resource.id, resource.title, resource.course.name
        for recipient_id in recipients:
            with side_effect(f"notify user {recipient_id} of new resource {resource_id}"):
                NotificationService.notify_resource_uploaded(
                    resource_id, title, course_name, recipient_id, uploader.id, uploader.name
                )

    @staticmethod
    def update_resource(actor, resource_id, payload):
        resource = ResourceService.get_resource(resource_id)
        ResourceService._ensure_owner_or_admin(resource, actor, "update")

        title = clean_text(payload.get("title"), "Title")
        if len(title) > 200:
            raise BadRequestError("Resource title must be at most 200 characters.")
        resource.title = title or resource.title
        resource.description = payload.get("description") or resource.description
        resource.tags = split_tags(payload.get("tags"), fallback=resource.tags or [])
        if payload.get("type"):
            resource.type = require_choice(payload["type"], RESOURCE_TYPES, "resource type")
        db.session.commit()
        return resource

    @staticmethod
    def delete_resource(actor, resource_id):
        resource = ResourceService.get_resource(resource_id)
        ResourceService._ensure_owner_or_admin(resource, actor, "delete")

        resource.is_active = False
        uploader = db.session.get(User, resource.uploaded_by_id)
        if uploader is not None and uploader.contribution_count > 0:
            uploader.contribution_count = User.contribution_count - 1
        db.session.commit()

    @staticmethod
    def toggle_like(actor, resource_id):
        resource = ResourceService.get_resource(resource_id)

        is_liked = any(user.id == actor.id for user in resource.likes)
        if is_liked:
            resource.likes = [user for user in resource.likes if user.id != actor.id]
        else:
            resource.likes.append(actor)
        db.session.commit()
        likes_count = len(resource.likes)

        owner_id = resource.uploaded_by_id
        if not is_liked and owner_id != actor.id:
            with side_effect(f"notify owner of like on resource {resource.id}"):
                NotificationService.notify_resource_liked(resource.id, resource.title, owner_id, actor.id, actor.name)
            AchievementService.check_and_award(owner_id, "like", likes_count)
        return resource, not is_liked, likes_count

    @staticmethod
    def add_comment(actor, resource_id, text):
        text = clean_text(text, "Comment")
        if not text:
            raise BadRequestError("Please provide comment text")
        if len(text) > 500:
            raise BadRequestError("Comment must be at most 500 characters.")
        resource = ResourceService.get_resource(resource_id)

        comment = ResourceComment(resource_id=resource.id, user_id=actor.id, text=text)
        db.session.add(comment)
        db.session.commit()

        if resource.uploaded_by_id != actor.id:
            with side_effect(f"notify owner of comment on resource {resource.id}"):
                NotificationService.notify_resource_commented(
                    resource.id, resource.title, resource.uploaded_by_id, actor.id, actor.name
                )
        AchievementService.check_and_award(actor.id, "comment", ResourceService.comment_count(actor.id))
        return comment

    @staticmethod
    def comment_count(user_id):
        return (
            ResourceComment.query.filter_by(user_id=user_id).count()
            + RequestComment.query.filter_by(user_id=user_id).count()
        )

    @staticmethod
    def register_download(resource_id):
        resource = ResourceService.get_resource(resource_id)
        resource.download_count += 1
        db.session.commit()
        AchievementService.check_and_award(resource.uploaded_by_id, "download", resource.download_count)
        return resource

    @staticmethod
    def toggle_pin(resource_id):
        resource = ResourceService.get_resource(resource_id)
        resource.is_pinned = not resource.is_pinned
        db.session.commit()
        return resource

    @staticmethod
    def approve(admin, resource_id):
        resource = ResourceService.get_resource(resource_id)
        if resource.is_approved:
            raise BadRequestError("Resource already approved")
        resource.is_approved = True
        resource.approved_by_id = admin.id
        db.session.commit()

        with side_effect(f"notify uploader of approval of resource {resource.id}"):
            NotificationService.notify_resource_approved(resource.id, resource.title, resource.uploaded_by_id, admin.id)
        ResourceService._announce(resource, resource.uploaded_by)
        return resource
