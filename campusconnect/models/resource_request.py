from campusconnect.extensions import db
from campusconnect.models.base import PKType, TimestampMixin, utcnow

request_upvotes = db.Table(
    "request_upvotes",
    db.Column("request_id", PKType, db.ForeignKey("resource_requests.id", ondelete="CASCADE"), primary_key=True),
    db.Column("user_id", PKType, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class ResourceRequest(TimestampMixin, db.Model):
    __tablename__ = "resource_requests"

    PRIORITIES = ("low", "medium", "high", "urgent")
    STATUSES = ("open", "in-progress", "fulfilled", "closed")

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.String(1000), nullable=False)
    course_id = db.Column(PKType, db.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    requested_by_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    resource_type = db.Column(db.String(24), nullable=False)
    priority = db.Column(db.String(16), nullable=False, default="medium")
    deadline = db.Column(db.DateTime(timezone=True), nullable=True)
    tags = db.Column(db.JSON, nullable=False, default=list)
    status = db.Column(db.String(16), nullable=False, default="open", index=True)
    fulfilled_by_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    fulfilled_resource_id = db.Column(PKType, db.ForeignKey("resources.id", ondelete="SET NULL"), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    course = db.relationship("Course")
    requested_by = db.relationship("User", foreign_keys=[requested_by_id])
    fulfilled_by = db.relationship("User", foreign_keys=[fulfilled_by_id])
    fulfilled_resource = db.relationship("Resource")
    upvotes = db.relationship("User", secondary=request_upvotes, lazy="select")
    comments = db.relationship(
        "RequestComment",
        back_populates="request",
        order_by="RequestComment.created_at",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.Index("ix_resource_requests_course_status", "course_id", "status"),
        db.Index("ix_resource_requests_priority_deadline", "priority", "deadline"),
    )


class RequestComment(db.Model):
    __tablename__ = "request_comments"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    request_id = db.Column(PKType, db.ForeignKey("resource_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    text = db.Column(db.String(500), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    request = db.relationship("ResourceRequest", back_populates="comments")
    user = db.relationship("User")
