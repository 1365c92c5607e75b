from contextlib import contextmanager

from flask import current_app
from sqlalchemy import or_

from campusconnect.errors import BadRequestError, NotFoundError
from campusconnect.extensions import db
from campusconnect.models import Notification, User
from campusconnect.models.base import utcnow
from campusconnect.models.refs import RELATED_MODELS


@contextmanager
def side_effect(description):
    """Run a best-effort follow-up of an already persisted action.

    Failures are rolled back and logged, never raised to the request.
    """
    try:
        yield
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to %s", description)


class NotificationService:
    @staticmethod
    def create_notification(
        recipient_id,
        type,
        title,
        message,
        sender_id=None,
        related_model=None,
        related_id=None,
        priority="medium",
        expires_at=None,
    ):
        if type not in Notification.TYPES:
            raise BadRequestError(f"Invalid notification type: {type}")
        if priority not in Notification.PRIORITIES:
            raise BadRequestError(f"Invalid notification priority: {priority}")
        if related_model is not None and related_model not in RELATED_MODELS:
            raise BadRequestError(f"Invalid related model: {related_model}")

        notification = Notification(
            recipient_id=recipient_id,
            sender_id=sender_id,
            type=type,
            title=title[:200],
            message=message[:500],
            related_model=related_model,
            related_id=related_id,
            priority=priority,
            expires_at=expires_at,
        )
        db.session.add(notification)
        db.session.commit()
        current_app.logger.info("Notification created for user %s: %s", recipient_id, notification.title)
        return notification

    # Resources

    @staticmethod
    def notify_resource_uploaded(resource_id, resource_title, course_name, recipient_id, uploader_id, uploader_name):
        return NotificationService.create_notification(
            recipient_id=recipient_id,
            sender_id=uploader_id,
            type="new_resource",
            title="New resource available",
            message=f'{uploader_name} uploaded "{resource_title}" to {course_name}.',
            related_model="Resource",
            related_id=resource_id,
            priority="medium",
        )

    @staticmethod
    def notify_resource_approved(resource_id, resource_title, uploader_id, admin_id):
        return NotificationService.create_notification(
            recipient_id=uploader_id,
            sender_id=admin_id,
            type="resource_approved",
            title="Resource approved",
            message=f'Your resource "{resource_title}" has been approved and is now available to other students.',
            related_model="Resource",
            related_id=resource_id,
            priority="high",
        )

    @staticmethod
    def notify_resource_liked(resource_id, resource_title, owner_id, liker_id, liker_name):
        return NotificationService.create_notification(
            recipient_id=owner_id,
            sender_id=liker_id,
            type="resource_liked",
            title="Resource liked",
            message=f'{liker_name} liked your resource "{resource_title}".',
            related_model="Resource",
            related_id=resource_id,
            priority="low",
        )

    @staticmethod
    def notify_resource_commented(resource_id, resource_title, owner_id, commenter_id, commenter_name):
        return NotificationService.create_notification(
            recipient_id=owner_id,
            sender_id=commenter_id,
            type="resource_commented",
            title="New comment on your resource",
            message=f'{commenter_name} commented on your resource "{resource_title}".',
            related_model="Resource",
            related_id=resource_id,
            priority="medium",
        )

    @staticmethod
    def notify_bookmark_added(resource_id, resource_title, user_id):
        return NotificationService.create_notification(
            recipient_id=user_id,
            type="system",
            title="Bookmark added",
            message=f'You bookmarked "{resource_title}".',
            related_model="Resource",
            related_id=resource_id,
            priority="low",
        )

    # Requests

    @staticmethod
    def notify_request_created(request_id, request_title, requester_id):
        return NotificationService.create_notification(
            recipient_id=requester_id,
            type="system",
            title="Request created",
            message=f'Your request "{request_title}" has been created and is now visible to other students.',
            related_model="ResourceRequest",
            related_id=request_id,
            priority="medium",
        )

    @staticmethod
    def notify_request_fulfilled(request_id, request_title, requester_id, fulfiller_id, fulfiller_name):
        return NotificationService.create_notification(
            recipient_id=requester_id,
            sender_id=fulfiller_id,
            type="request_fulfilled",
            title="Request fulfilled",
            message=f'{fulfiller_name} has fulfilled your request "{request_title}".',
            related_model="ResourceRequest",
            related_id=request_id,
            priority="high",
        )

    @staticmethod
    def notify_request_commented(request_id, request_title, requester_id, commenter_id, commenter_name):
        return NotificationService.create_notification(
            recipient_id=requester_id,
            sender_id=commenter_id,
            type="request_commented",
            title="New comment on your request",
            message=f'{commenter_name} commented on your request "{request_title}".',
            related_model="ResourceRequest",
            related_id=request_id,
            priority="medium",
        )

    # Courses and study groups

    @staticmethod
    def notify_course_enrollment(course_id, course_name, user_id):
        return NotificationService.create_notification(
            recipient_id=user_id,
            type="system",
            title="Course enrollment",
            message=f'You have successfully enrolled in "{course_name}".',
            related_model="Course",
            related_id=course_id,
            priority="medium",
        )

    @staticmethod
    def notify_study_group_joined(group_id, group_title, owner_id, joiner_id, joiner_name):
        return NotificationService.create_notification(
            recipient_id=owner_id,
            sender_id=joiner_id,
            type="study_group_joined",
            title="New member joined your study group",
            message=f'{joiner_name} joined your study group "{group_title}".',
            related_model="StudyGroup",
            related_id=group_id,
            priority="low",
        )

    @staticmethod
    def notify_study_group_message(group_id, group_title, recipient_id, sender_id, sender_name):
        return NotificationService.create_notification(
            recipient_id=recipient_id,
            sender_id=sender_id,
            type="study_group_message",
            title="New message in study group",
            message=f'{sender_name} sent a message in "{group_title}".',
            related_model="StudyGroup",
            related_id=group_id,
            priority="medium",
        )

    # Achievements and system

    @staticmethod
    def notify_achievement_earned(achievement_id, achievement_name, user_id):
        return NotificationService.create_notification(
            recipient_id=user_id,
            type="achievement_earned",
            title="Achievement earned!",
            message=f'Congratulations! You earned the "{achievement_name}" achievement.',
            related_model="Achievement",
            related_id=achievement_id,
            priority="high",
        )

    @staticmethod
    def notify_system_update(user_id, message, admin_id=None, title="System Update"):
        return NotificationService.create_notification(
            recipient_id=user_id,
            sender_id=admin_id,
            type="system",
            title=title,
            message=message,
            priority="medium",
        )

    @staticmethod
    def notify_deadline_reminder(user_id, title, message, related_model=None, related_id=None):
        return NotificationService.create_notification(
            recipient_id=user_id,
            type="deadline_reminder",
            title=title,
            message=message,
            related_model=related_model,
            related_id=related_id,
            priority="high",
        )

    @staticmethod
    def broadcast_to_all_users(title, message, admin_id=None):
        user_ids = [row.id for row in User.query.with_entities(User.id).filter_by(is_active_user=True).all()]
        delivered = 0
        for user_id in user_ids:
            with side_effect(f"broadcast notification to user {user_id}"):
                NotificationService.notify_system_update(user_id, message, admin_id=admin_id, title=title)
                delivered += 1
        return delivered

    # Read side

    @staticmethod
    def _visible_to(user_id):
        now = utcnow()
        return Notification.query.filter(Notification.recipient_id == user_id).filter(
            or_(Notification.expires_at.is_(None), Notification.expires_at > now)
        )

    @staticmethod
    def list_for_user(user_id, page=1, per_page=20, is_read=None):
        query = NotificationService._visible_to(user_id)
        if is_read is not None:
            query = query.filter(Notification.is_read.is_(is_read))
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).paginate(
            page=page, per_page=per_page, error_out=False
        )

    @staticmethod
    def unread_count(user_id):
        return NotificationService._visible_to(user_id).filter(Notification.is_read.is_(False)).count()

    @staticmethod
    def mark_as_read(notification_id, user_id):
        notification = Notification.query.filter_by(id=notification_id, recipient_id=user_id).first()
        if not notification:
            raise NotFoundError(f"No notification with id : {notification_id}")
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = utcnow()
            db.session.commit()
        return notification

    @staticmethod
    def mark_all_read(user_id):
        updated = Notification.query.filter_by(recipient_id=user_id, is_read=False).update(
            {"is_read": True, "read_at": utcnow()}, synchronize_session=False
        )
        db.session.commit()
        return updated

    @staticmethod
    def delete_for_user(notification_id, user_id):
        notification = Notification.query.filter_by(id=notification_id, recipient_id=user_id).first()
        if not notification:
            raise NotFoundError(f"No notification with id : {notification_id}")
        db.session.delete(notification)
        db.session.commit()

    @staticmethod
    def purge_expired(now=None):
        cutoff = now or utcnow()
        removed = Notification.query.filter(
            Notification.expires_at.isnot(None), Notification.expires_at <= cutoff
        ).delete(synchronize_session=False)
        db.session.commit()
        return removed
