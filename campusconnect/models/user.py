from flask_login import UserMixin

from campusconnect.extensions import db
from campusconnect.models.base import PKType, TimestampMixin


class User(UserMixin, TimestampMixin, db.Model):
    __tablename__ = "users"

    ROLES = ("student", "admin")
    YEARS = ("1st", "2nd", "3rd", "4th", "Graduate", "PhD")

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(16), nullable=False, default="student", index=True)
    bio = db.Column(db.String(500), nullable=False, default="")
    interests = db.Column(db.JSON, nullable=False, default=list)
    university = db.Column(db.String(100), nullable=False)
    major = db.Column(db.String(100), nullable=True)
    year = db.Column(db.String(16), nullable=True)
    profile_picture = db.Column(db.String(500), nullable=False, default="")
    contribution_count = db.Column(db.Integer, nullable=False, default=0)
    # Denormalised copy of user_achievements, appended on every award.
    achievement_ids = db.Column(db.JSON, nullable=False, default=list)
    is_active_user = db.Column(db.Boolean, nullable=False, default=True)

    bookmarks = db.relationship(
        "Bookmark",
        back_populates="user",
        lazy="dynamic",
        cascade="all, delete-orphan",
        order_by="Bookmark.id",
    )
    notifications = db.relationship(
        "Notification",
        back_populates="recipient",
        lazy="dynamic",
        foreign_keys="Notification.recipient_id",
    )
    earned_achievements = db.relationship("UserAchievement", back_populates="user", lazy="dynamic")

    @property
    def is_admin(self):
        return self.role == "admin"


class Bookmark(TimestampMixin, db.Model):
    __tablename__ = "bookmarks"

    TARGET_TYPES = ("Resource", "StudyGroup")

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    user_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    target_type = db.Column(db.String(24), nullable=False)
    target_id = db.Column(PKType, nullable=False)

    user = db.relationship("User", back_populates="bookmarks")

    __table_args__ = (
        db.UniqueConstraint("user_id", "target_type", "target_id", name="uq_bookmark_user_target"),
    )
