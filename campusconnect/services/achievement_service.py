from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from campusconnect.errors import BadRequestError, NotFoundError
from campusconnect.extensions import cache, db
from campusconnect.models import Achievement, User, UserAchievement
from campusconnect.services.helpers import parse_int
from campusconnect.services.notification_service import NotificationService, side_effect

CATALOGUE_CACHE_KEY = "achievements:catalogue"

EDITABLE_FIELDS = ("name", "description", "icon", "type", "rarity")


class AchievementService:
    @staticmethod
    def list_active():
        achievements = Achievement.query.filter_by(is_active=True).all()
        return sorted(achievements, key=lambda a: (a.rarity_rank, a.points, a.id))

    @staticmethod
    def for_user(user_id):
        return (
            UserAchievement.query.options(joinedload(UserAchievement.achievement))
            .filter_by(user_id=user_id)
            .order_by(UserAchievement.earned_at.desc(), UserAchievement.id.desc())
            .all()
        )

    @staticmethod
    def _apply_payload(achievement, payload):
        for field in EDITABLE_FIELDS:
            if payload.get(field) not in (None, ""):
                setattr(achievement, field, payload[field])

        if payload.get("points") not in (None, ""):
            achievement.points = parse_int(payload["points"], "Points", minimum=0)

        criteria = payload.get("criteria") or {}
        if criteria.get("count") is not None:
            try:
                count = int(criteria["count"])
                if count < 1:
                    raise ValueError
            except (TypeError, ValueError) as exc:
                raise BadRequestError("Criteria count must be a positive integer.") from exc
            achievement.criteria_count = count
        if criteria.get("timeframe"):
            achievement.criteria_timeframe = criteria["timeframe"]

        if not achievement.name or not achievement.description or not achievement.type:
            raise BadRequestError("Please provide achievement name, description and type.")
        if achievement.type not in Achievement.TYPES:
            raise BadRequestError("Invalid achievement type.")
        if achievement.rarity not in Achievement.RARITIES:
            raise BadRequestError("Invalid achievement rarity.")
        if achievement.criteria_timeframe not in Achievement.TIMEFRAMES:
            raise BadRequestError("Invalid achievement timeframe.")

    @staticmethod
    def create_achievement(payload):
        achievement = Achievement(
            icon="🏆",
            points=10,
            rarity="common",
            criteria_count=1,
            criteria_timeframe="all-time",
        )
        AchievementService._apply_payload(achievement, payload)
        db.session.add(achievement)
        db.session.commit()
        cache.delete(CATALOGUE_CACHE_KEY)
        return achievement

    @staticmethod
    def update_achievement(achievement_id, payload):
        achievement = db.session.get(Achievement, achievement_id)
        if not achievement:
            raise NotFoundError(f"No achievement with id : {achievement_id}")
        AchievementService._apply_payload(achievement, payload)
        db.session.commit()
        cache.delete(CATALOGUE_CACHE_KEY)
        return achievement

    @staticmethod
    def delete_achievement(achievement_id):
        achievement = db.session.get(Achievement, achievement_id)
        if not achievement or not achievement.is_active:
            raise NotFoundError(f"No achievement with id : {achievement_id}")
        achievement.is_active = False
        db.session.commit()
        cache.delete(CATALOGUE_CACHE_KEY)

    @staticmethod
    def _earned_achievement_ids(user_id):
        rows = UserAchievement.query.with_entities(UserAchievement.achievement_id).filter_by(user_id=user_id).all()
        return {row.achievement_id for row in rows}

    @staticmethod
    def check_and_award(user_id, achievement_type, count=1):
        """Award every active ``achievement_type`` badge whose threshold ``count`` meets.

        ``count`` is the caller's cumulative tally for the user. Never raises;
        returns the ids of newly awarded achievements.
        """
        awarded = []
        try:
            candidates = [
                (a.id, a.name, a.criteria_count)
                for a in Achievement.query.filter_by(type=achievement_type, is_active=True)
                .order_by(Achievement.criteria_count.asc(), Achievement.id.asc())
                .all()
            ]
            earned = AchievementService._earned_achievement_ids(user_id)
        except Exception:
            db.session.rollback()
            current_app.logger.exception("Error checking %s achievements for user %s", achievement_type, user_id)
            return awarded

        for achievement_id, name, threshold in candidates:
            if achievement_id in earned or count < threshold:
                continue
            try:
                if AchievementService._award(user_id, achievement_id, name, count):
                    awarded.append(achievement_id)
            except Exception:
                db.session.rollback()
                current_app.logger.exception("Failed to award achievement %s to user %s", achievement_id, user_id)
        return awarded

    @staticmethod
    def _award(user_id, achievement_id, name, count):
        try:
            db.session.add(UserAchievement(user_id=user_id, achievement_id=achievement_id, progress=count))
            db.session.commit()
        except IntegrityError:
            # A concurrent award already inserted this pair.
            db.session.rollback()
            current_app.logger.info("User %s already holds achievement %s", user_id, achievement_id)
            return False

        user = db.session.get(User, user_id)
        if user is not None and achievement_id not in (user.achievement_ids or []):
            user.achievement_ids = [*(user.achievement_ids or []), achievement_id]
            db.session.commit()

        with side_effect(f"notify user {user_id} of achievement {achievement_id}"):
            NotificationService.notify_achievement_earned(achievement_id, name, user_id)
        return True
