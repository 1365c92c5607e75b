from datetime import timedelta

from flask import current_app

from campusconnect.errors import BadRequestError, UnauthorizedError
from campusconnect.extensions import db
from campusconnect.models import Course, RequestComment, Resource, ResourceRequest
from campusconnect.models.base import RESOURCE_TYPES, utcnow
from campusconnect.services.achievement_service import AchievementService
from campusconnect.services.helpers import (
    clean_text,
    get_active_or_404,
    parse_datetime,
    parse_int,
    require_choice,
    split_tags,
    text_search,
)
from campusconnect.services.notification_service import NotificationService, side_effect
from campusconnect.services.resource_service import ResourceService

# Status changes allowed through a plain update. Fulfilment has its own action.
UPDATE_TRANSITIONS = {
    "open": {"in-progress", "closed"},
    "in-progress": {"closed"},
}

PRIORITY_ORDER = db.case(
    {"urgent": 0, "high": 1, "medium": 2, "low": 3},
    value=ResourceRequest.priority,
    else_=4,
)


class RequestService:
    @staticmethod
    def _active():
        return ResourceRequest.query.filter(ResourceRequest.is_active.is_(True))

    @staticmethod
    def _ensure_owner_or_admin(resource_request, actor, action):
        if resource_request.requested_by_id != actor.id and not actor.is_admin:
            raise UnauthorizedError(f"Not authorized to {action} this request")

    @staticmethod
    def list_requests(filters, page=1, per_page=20):
        query = RequestService._active()
        status = filters.get("status") or "open"
        if status != "all":
            query = query.filter(ResourceRequest.status == status)
        if filters.get("course"):
            query = query.filter(ResourceRequest.course_id == parse_int(filters["course"], "Course"))
        if filters.get("resourceType") and filters["resourceType"] != "all":
            query = query.filter(ResourceRequest.resource_type == filters["resourceType"])
        if filters.get("priority") and filters["priority"] != "all":
            query = query.filter(ResourceRequest.priority == filters["priority"])
        if filters.get("search"):
            query = text_search(
                query, filters["search"], ResourceRequest.title, ResourceRequest.description, ResourceRequest.tags
            )
        return query.order_by(PRIORITY_ORDER, ResourceRequest.created_at.desc(), ResourceRequest.id.desc()).paginate(
            page=page, per_page=per_page, error_out=False
        )

    @staticmethod
    def search_requests(term, limit=10):
        if not term:
            raise BadRequestError("Please provide search query")
        query = text_search(
            RequestService._active(), term, ResourceRequest.title, ResourceRequest.description, ResourceRequest.tags
        )
        return query.order_by(ResourceRequest.created_at.desc()).limit(limit).all()

    @staticmethod
    def requests_for_user(user_id):
        return (
            RequestService._active()
            .filter(ResourceRequest.requested_by_id == user_id)
            .order_by(ResourceRequest.created_at.desc(), ResourceRequest.id.desc())
            .all()
        )

    @staticmethod
    def get_request(request_id):
        return get_active_or_404(ResourceRequest, request_id, "request")

    @staticmethod
    def create_request(requester, payload):
        title = clean_text(payload.get("title"), "Title")
        description = clean_text(payload.get("description"), "Description")
        if not title or not description or not payload.get("course") or not payload.get("resourceType"):
            raise BadRequestError("Please provide title, description, course and resource type")
        if len(title) > 200:
            raise BadRequestError("Request title must be at most 200 characters.")
        if len(description) > 1000:
            raise BadRequestError("Request description must be at most 1000 characters.")
        course = get_active_or_404(Course, parse_int(payload.get("course"), "Course"), "course")

        resource_request = ResourceRequest(
            title=title,
            description=description,
            course_id=course.id,
            requested_by_id=requester.id,
            resource_type=require_choice(payload.get("resourceType"), RESOURCE_TYPES, "resource type"),
            priority=require_choice(payload.get("priority") or "medium", ResourceRequest.PRIORITIES, "priority"),
            deadline=parse_datetime(payload.get("deadline"), "deadline"),
            tags=split_tags(payload.get("tags")),
        )
        db.session.add(resource_request)
        db.session.commit()

        request_count = ResourceRequest.query.filter_by(requested_by_id=requester.id).count()
        AchievementService.check_and_award(requester.id, "request", request_count)
        with side_effect(f"confirm creation of request {resource_request.id}"):
            NotificationService.notify_request_created(resource_request.id, resource_request.title, requester.id)
        return resource_request

    @staticmethod
    def update_request(actor, request_id, payload):
        resource_request = RequestService.get_request(request_id)
        RequestService._ensure_owner_or_admin(resource_request, actor, "update")

        status = payload.get("status")
        if status and status != resource_request.status:
            if status not in UPDATE_TRANSITIONS.get(resource_request.status, set()):
                raise BadRequestError(f"Cannot change request status from {resource_request.status} to {status}")
            resource_request.status = status

        title = clean_text(payload.get("title"), "Title")
        if len(title) > 200:
            raise BadRequestError("Request title must be at most 200 characters.")
        resource_request.title = title or resource_request.title
        resource_request.description = clean_text(payload.get("description"), "Description") or resource_request.description
        if payload.get("priority"):
            resource_request.priority = require_choice(payload["priority"], ResourceRequest.PRIORITIES, "priority")
        if payload.get("resourceType"):
            resource_request.resource_type = require_choice(payload["resourceType"], RESOURCE_TYPES, "resource type")
        if "deadline" in payload:
            resource_request.deadline = parse_datetime(payload.get("deadline"), "deadline")
        resource_request.tags = split_tags(payload.get("tags"), fallback=resource_request.tags or [])
        db.session.commit()
        return resource_request

    @staticmethod
    def delete_request(actor, request_id):
        resource_request = RequestService.get_request(request_id)
        RequestService._ensure_owner_or_admin(resource_request, actor, "delete")
        resource_request.is_active = False
        db.session.commit()

    @staticmethod
    def add_comment(actor, request_id, text):
        text = clean_text(text, "Comment")
        if not text:
            raise BadRequestError("Please provide comment text")
        if len(text) > 500:
            raise BadRequestError("Comment must be at most 500 characters.")
        resource_request = RequestService.get_request(request_id)

        comment = RequestComment(request_id=resource_request.id, user_id=actor.id, text=text)
        db.session.add(comment)
        db.session.commit()

        if resource_request.requested_by_id != actor.id:
            with side_effect(f"notify requester of comment on request {resource_request.id}"):
                NotificationService.notify_request_commented(
                    resource_request.id, resource_request.title, resource_request.requested_by_id, actor.id, actor.name
                )
        AchievementService.check_and_award(actor.id, "comment", ResourceService.comment_count(actor.id))
        return comment

    @staticmethod
    def toggle_upvote(actor, request_id):
        resource_request = RequestService.get_request(request_id)

        has_upvoted = any(user.id == actor.id for user in resource_request.upvotes)
        if has_upvoted:
            resource_request.upvotes = [user for user in resource_request.upvotes if user.id != actor.id]
        else:
            resource_request.upvotes.append(actor)
        db.session.commit()
        return resource_request, not has_upvoted, len(resource_request.upvotes)

    @staticmethod
    def fulfill(actor, request_id, resource_id):
        resource_request = RequestService.get_request(request_id)
        if resource_id in (None, ""):
            raise BadRequestError("Please provide resource ID")
        if resource_request.status == "fulfilled":
            raise BadRequestError("Request already fulfilled")
        if resource_request.status == "closed":
            raise BadRequestError("Cannot fulfill a closed request")
        resource = get_active_or_404(Resource, parse_int(resource_id, "Resource ID"), "resource")

        resource_request.status = "fulfilled"
        resource_request.fulfilled_by_id = actor.id
        resource_request.fulfilled_resource_id = resource.id
        db.session.commit()

        if resource_request.requested_by_id != actor.id:
            with side_effect(f"notify requester of fulfilment of request {resource_request.id}"):
                NotificationService.notify_request_fulfilled(
                    resource_request.id, resource_request.title, resource_request.requested_by_id, actor.id, actor.name
                )
        return resource_request

    @staticmethod
    def remind_upcoming_deadlines(hours=24):
        """Send a deadline reminder for every pending request due within ``hours``.

        Returns the number of reminders delivered.
        """
        now = utcnow()
        due = (
            RequestService._active()
            .filter(
                ResourceRequest.status.in_(("open", "in-progress")),
                ResourceRequest.deadline.isnot(None),
                ResourceRequest.deadline > now,
                ResourceRequest.deadline <= now + timedelta(hours=hours),
            )
            .order_by(ResourceRequest.deadline.asc())
            .all()
        )
        reminders = [(r.id, r.title, r.requested_by_id) for r in due]

        delivered = 0
        for request_id, title, requester_id in reminders:
            with side_effect(f"send deadline reminder for request {request_id}"):
                NotificationService.notify_deadline_reminder(
                    requester_id,
                    "Request Deadline Approaching",
                    f'Your request "{title}" is due within {hours} hours.',
                    related_model="ResourceRequest",
                    related_id=request_id,
                )
                delivered += 1
        current_app.logger.info("Sent %s deadline reminders", delivered)
        return delivered
