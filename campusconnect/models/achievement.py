from campusconnect.extensions import db
from campusconnect.models.base import PKType, TimestampMixin, utcnow


class Achievement(TimestampMixin, db.Model):
    __tablename__ = "achievements"

    TYPES = ("upload", "download", "like", "comment", "study_group", "request", "special")
    TIMEFRAMES = ("daily", "weekly", "monthly", "yearly", "all-time")
    RARITIES = ("common", "uncommon", "rare", "epic", "legendary")

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=False)
    icon = db.Column(db.String(16), nullable=False, default="🏆")
    type = db.Column(db.String(24), nullable=False, index=True)
    criteria_count = db.Column(db.Integer, nullable=False, default=1)
    criteria_timeframe = db.Column(db.String(16), nullable=False, default="all-time")
    points = db.Column(db.Integer, nullable=False, default=10)
    rarity = db.Column(db.String(16), nullable=False, default="common")
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    @property
    def rarity_rank(self):
        return self.RARITIES.index(self.rarity) if self.rarity in self.RARITIES else len(self.RARITIES)


class UserAchievement(TimestampMixin, db.Model):
    __tablename__ = "user_achievements"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    user_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    achievement_id = db.Column(PKType, db.ForeignKey("achievements.id", ondelete="CASCADE"), nullable=False)
    earned_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    progress = db.Column(db.Integer, nullable=False, default=0)

    user = db.relationship("User", back_populates="earned_achievements")
    achievement = db.relationship("Achievement")

    __table_args__ = (
        db.UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement"),
    )
