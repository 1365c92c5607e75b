from campusconnect.extensions import db
from campusconnect.models.base import PKType, TimestampMixin


class Notification(TimestampMixin, db.Model):
    __tablename__ = "notifications"

    TYPES = (
        "new_resource",
        "resource_approved",
        "resource_liked",
        "resource_commented",
        "study_group_joined",
        "study_group_message",
        "request_fulfilled",
        "request_commented",
        "achievement_earned",
        "deadline_reminder",
        "system",
    )
    PRIORITIES = ("low", "medium", "high")

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    recipient_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    type = db.Column(db.String(32), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.String(500), nullable=False)
    # Polymorphic reference: related_model names the table related_id points into.
    related_model = db.Column(db.String(24), nullable=True)
    related_id = db.Column(PKType, nullable=True)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    read_at = db.Column(db.DateTime(timezone=True), nullable=True)
    priority = db.Column(db.String(8), nullable=False, default="medium")
    expires_at = db.Column(db.DateTime(timezone=True), nullable=True, index=True)

    recipient = db.relationship("User", back_populates="notifications", foreign_keys=[recipient_id])
    sender = db.relationship("User", foreign_keys=[sender_id])

    __table_args__ = (
        db.Index("ix_notifications_recipient_read", "recipient_id", "is_read"),
    )
