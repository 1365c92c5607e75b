from sqlalchemy.orm import joinedload

from campusconnect.errors import BadRequestError, NotFoundError, UnauthorizedError
from campusconnect.extensions import db
from campusconnect.models import Course, StudyGroup, StudyGroupMember
from campusconnect.services.achievement_service import AchievementService
from campusconnect.services.helpers import (
    clean_text,
    get_active_or_404,
    parse_int,
    require_choice,
    split_tags,
    text_search,
)
from campusconnect.services.notification_service import NotificationService, side_effect

TEXT_FIELDS = {
    "title": 200,
    "description": 1000,
    "location": 200,
    "meeting_time": 100,
    "contact_info": 200,
}


def refresh_status(group):
    """Recompute ``open``/``full`` from membership, closing an empty group."""
    if not group.members:
        group.status = "closed"
        group.is_active = False
    elif len(group.members) >= group.max_members:
        group.status = "full"
    else:
        group.status = "open"


class StudyGroupService:
    @staticmethod
    def _active():
        return StudyGroup.query.options(joinedload(StudyGroup.course), joinedload(StudyGroup.created_by)).filter(
            StudyGroup.is_active.is_(True)
        )

    @staticmethod
    def _apply_payload(group, payload):
        for field, max_length in TEXT_FIELDS.items():
            if field not in payload:
                continue
            value = clean_text(payload.get(field), f"Study group {field}")
            if len(value) > max_length:
                raise BadRequestError(f"Study group {field} must be at most {max_length} characters.")
            setattr(group, field, value or None)
        if "max_members" in payload:
            group.max_members = parse_int(
                payload.get("max_members"), "Max members", minimum=2, maximum=20, default=group.max_members
            )
        if payload.get("meeting_type"):
            group.meeting_type = require_choice(payload["meeting_type"], StudyGroup.MEETING_TYPES, "meeting type")
        if "tags" in payload:
            group.tags = split_tags(payload.get("tags"))

        if not group.title or not group.description:
            raise BadRequestError("Please provide title, description and course")

    @staticmethod
    def list_groups(filters, page=1, per_page=20):
        query = StudyGroupService._active()
        status = filters.get("status") or "open"
        if status != "all":
            query = query.filter(StudyGroup.status == status)
        if filters.get("course"):
            query = query.filter(StudyGroup.course_id == parse_int(filters["course"], "Course"))
        if filters.get("meetingType") and filters["meetingType"] != "all":
            query = query.filter(StudyGroup.meeting_type == filters["meetingType"])
        if filters.get("search"):
            query = text_search(query, filters["search"], StudyGroup.title, StudyGroup.description, StudyGroup.tags)
        return query.order_by(StudyGroup.created_at.desc(), StudyGroup.id.desc()).paginate(
            page=page, per_page=per_page, error_out=False
        )

    @staticmethod
    def search_groups(term, limit=10):
        if not term:
            raise BadRequestError("Please provide search query")
        query = text_search(
            StudyGroupService._active(), term, StudyGroup.title, StudyGroup.description, StudyGroup.tags
        )
        return query.order_by(StudyGroup.created_at.desc()).limit(limit).all()

    @staticmethod
    def groups_for_user(user_id):
        return (
            StudyGroupService._active()
            .join(StudyGroupMember, StudyGroupMember.group_id == StudyGroup.id)
            .filter(StudyGroupMember.user_id == user_id)
            .order_by(StudyGroup.created_at.desc(), StudyGroup.id.desc())
            .all()
        )

    @staticmethod
    def get_group(group_id):
        return get_active_or_404(StudyGroup, group_id, "study group")

    @staticmethod
    def create_group(creator, payload):
        if not payload.get("course"):
            raise BadRequestError("Please provide title, description and course")
        course = get_active_or_404(Course, parse_int(payload.get("course"), "Course"), "course")

        group = StudyGroup(course_id=course.id, created_by_id=creator.id, max_members=5, tags=[])
        StudyGroupService._apply_payload(group, payload)
        group.members.append(StudyGroupMember(user_id=creator.id))
        refresh_status(group)
        db.session.add(group)
        db.session.commit()

        created_count = StudyGroup.query.filter_by(created_by_id=creator.id).count()
        AchievementService.check_and_award(creator.id, "study_group", created_count)
        return group

    @staticmethod
    def update_group(actor, group_id, payload):
        group = StudyGroupService.get_group(group_id)
        if group.created_by_id != actor.id:
            raise UnauthorizedError("Only the group creator can update this group")

        StudyGroupService._apply_payload(group, payload)
        if group.max_members < len(group.members):
            raise BadRequestError("Max members cannot be lower than the current member count")
        refresh_status(group)
        db.session.commit()
        return group

    @staticmethod
    def delete_group(actor, group_id):
        group = StudyGroupService.get_group(group_id)
        if group.created_by_id != actor.id and not actor.is_admin:
            raise UnauthorizedError("Not authorized to delete this group")
        group.is_active = False
        db.session.commit()

    @staticmethod
    def join(actor, group_id):
        group = db.session.get(StudyGroup, group_id)
        if group is None:
            raise NotFoundError(f"No study group with id : {group_id}")
        if not group.is_active:
            raise BadRequestError("Study group is not active")
        if group.status == "closed":
            raise BadRequestError("Study group is closed")
        if group.has_member(actor.id):
            raise BadRequestError("Already a member of this group")
        if group.status == "full" or len(group.members) >= group.max_members:
            raise BadRequestError("Study group is full")

        group.members.append(StudyGroupMember(user_id=actor.id))
        refresh_status(group)
        db.session.commit()

        if group.created_by_id != actor.id:
            with side_effect(f"notify creator of join to study group {group.id}"):
                NotificationService.notify_study_group_joined(
                    group.id, group.title, group.created_by_id, actor.id, actor.name
                )
        return group

    @staticmethod
    def leave(actor, group_id):
        group = StudyGroupService.get_group(group_id)
        if not group.has_member(actor.id):
            raise BadRequestError("Not a member of this group")

        group.members = [member for member in group.members if member.user_id != actor.id]
        if group.members and group.created_by_id == actor.id:
            group.created_by_id = group.members[0].user_id
        refresh_status(group)
        db.session.commit()
        return group
