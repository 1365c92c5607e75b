from campusconnect.extensions import db
from campusconnect.models.base import PKType, TimestampMixin, utcnow


class StudyGroup(TimestampMixin, db.Model):
    __tablename__ = "study_groups"

    MEETING_TYPES = ("online", "offline", "hybrid")

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.String(1000), nullable=False)
    course_id = db.Column(PKType, db.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    max_members = db.Column(db.Integer, nullable=False, default=5)
    meeting_type = db.Column(db.String(16), nullable=False, default="hybrid")
    location = db.Column(db.String(200), nullable=True)
    meeting_time = db.Column(db.String(100), nullable=True)
    tags = db.Column(db.JSON, nullable=False, default=list)
    status = db.Column(db.String(16), nullable=False, default="open", index=True)
    contact_info = db.Column(db.String(200), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    course = db.relationship("Course")
    created_by = db.relationship("User")
    members = db.relationship(
        "StudyGroupMember",
        back_populates="group",
        order_by="[StudyGroupMember.joined_at, StudyGroupMember.id]",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.Index("ix_study_groups_course_status", "course_id", "status"),
        db.CheckConstraint("max_members >= 2 AND max_members <= 20", name="ck_study_group_max_members"),
    )

    def has_member(self, user_id):
        return any(member.user_id == user_id for member in self.members)


class StudyGroupMember(db.Model):
    __tablename__ = "study_group_members"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    group_id = db.Column(PKType, db.ForeignKey("study_groups.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    joined_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    group = db.relationship("StudyGroup", back_populates="members")
    user = db.relationship("User")

    __table_args__ = (
        db.UniqueConstraint("group_id", "user_id", name="uq_study_group_member"),
    )
