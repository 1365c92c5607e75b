from campusconnect.extensions import db
from campusconnect.models.base import PKType, TimestampMixin, utcnow

resource_likes = db.Table(
    "resource_likes",
    db.Column("resource_id", PKType, db.ForeignKey("resources.id", ondelete="CASCADE"), primary_key=True),
    db.Column("user_id", PKType, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Resource(TimestampMixin, db.Model):
    __tablename__ = "resources"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.String(1000), nullable=True)
    type = db.Column(db.String(24), nullable=False, index=True)
    course_id = db.Column(PKType, db.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    uploaded_by_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    file_url = db.Column(db.String(500), nullable=False)
    file_name = db.Column(db.String(255), nullable=False)
    file_size = db.Column(db.Integer, nullable=True)
    file_type = db.Column(db.String(120), nullable=True)

    is_pinned = db.Column(db.Boolean, nullable=False, default=False)
    tags = db.Column(db.JSON, nullable=False, default=list)
    download_count = db.Column(db.Integer, nullable=False, default=0)
    is_approved = db.Column(db.Boolean, nullable=False, default=True, index=True)
    approved_by_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    course = db.relationship("Course")
    uploaded_by = db.relationship("User", foreign_keys=[uploaded_by_id])
    approved_by = db.relationship("User", foreign_keys=[approved_by_id])
    likes = db.relationship("User", secondary=resource_likes, lazy="select")
    comments = db.relationship(
        "ResourceComment",
        back_populates="resource",
        order_by="ResourceComment.created_at",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.Index("ix_resources_course_type", "course_id", "type"),
        db.Index("ix_resources_pinned_created", "is_pinned", "created_at"),
    )


class ResourceComment(db.Model):
    __tablename__ = "resource_comments"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    resource_id = db.Column(PKType, db.ForeignKey("resources.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    text = db.Column(db.String(500), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    resource = db.relationship("Resource", back_populates="comments")
    user = db.relationship("User")
