from campusconnect.extensions import db
from campusconnect.models.base import PKType, TimestampMixin

course_enrollments = db.Table(
    "course_enrollments",
    db.Column("course_id", PKType, db.ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True),
    db.Column("user_id", PKType, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Course(TimestampMixin, db.Model):
    __tablename__ = "courses"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    code = db.Column(db.String(20), nullable=False)
    description = db.Column(db.String(500), nullable=True)
    university = db.Column(db.String(100), nullable=False)
    department = db.Column(db.String(100), nullable=False)
    semester = db.Column(db.String(20), nullable=True)
    year = db.Column(db.Integer, nullable=True)
    instructor = db.Column(db.String(100), nullable=True)
    credits = db.Column(db.Integer, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    enrolled_students = db.relationship("User", secondary=course_enrollments, lazy="select")

    __table_args__ = (
        db.UniqueConstraint("code", "university", name="uq_course_code_university"),
        db.CheckConstraint("year IS NULL OR (year >= 2020 AND year <= 2030)", name="ck_course_year_range"),
        db.CheckConstraint("credits IS NULL OR (credits >= 1 AND credits <= 6)", name="ck_course_credits_range"),
    )
