from campusconnect.errors import BadRequestError, NotFoundError, UnauthorizedError
from campusconnect.extensions import db
from campusconnect.models import Bookmark, User
from campusconnect.models.refs import BOOKMARK_MODELS, resolve_reference
from campusconnect.services.helpers import clean_text, parse_int, split_tags, text_search
from campusconnect.services.media_service import MediaService
from campusconnect.services.notification_service import NotificationService, side_effect

USER_SORTS = {
    "latest": User.created_at.desc(),
    "oldest": User.created_at.asc(),
    "a-z": User.name.asc(),
    "z-a": User.name.desc(),
}


class UserService:
    @staticmethod
    def list_users(filters, page=1, per_page=10):
        query = User.query
        if filters.get("role"):
            query = query.filter(User.role == filters["role"])
        if filters.get("year"):
            query = query.filter(User.year == filters["year"])
        if filters.get("university"):
            query = query.filter(User.university.ilike(f"%{filters['university']}%"))
        if filters.get("search"):
            query = text_search(query, filters["search"], User.name, User.bio, User.university, User.major)
        query = query.order_by(USER_SORTS.get(filters.get("sort"), User.id.asc()))
        return query.paginate(page=page, per_page=per_page, error_out=False)

    @staticmethod
    def get_user(user_id):
        user = db.session.get(User, user_id)
        if not user:
            raise NotFoundError(f"No user with id : {user_id}")
        return user

    @staticmethod
    def get_user_for(actor, user_id):
        user = UserService.get_user(user_id)
        if not actor.is_admin and actor.id != user.id:
            raise UnauthorizedError("Not authorized to access this route")
        return user

    @staticmethod
    def update_profile(user, payload):
        name = clean_text(payload.get("name"), "Name")
        if not name:
            raise BadRequestError("Please provide all values")
        if not 3 <= len(name) <= 50:
            raise BadRequestError("Name must be between 3 and 50 characters")
        email = clean_text(payload.get("email"), "Email").lower()
        if email and email != user.email:
            if User.query.filter(User.email == email, User.id != user.id).first():
                raise BadRequestError("Email already exists")
            user.email = email
        year = payload.get("year")
        if year and year not in User.YEARS:
            raise BadRequestError("Invalid year.")

        user.name = name
        user.bio = (payload.get("bio") or user.bio or "")[:500]
        user.interests = split_tags(payload.get("interests"), fallback=user.interests or [])
        user.major = payload.get("major") or user.major
        user.year = year or user.year
        db.session.commit()
        return user

    @staticmethod
    def update_profile_picture(user, storage):
        stored = MediaService.save_profile_picture(storage)
        previous = user.profile_picture
        user.profile_picture = stored.url
        db.session.commit()

        if previous:
            with side_effect(f"delete previous profile picture of user {user.id}"):
                MediaService.delete(MediaService.extract_public_id(previous))
        return user

    # Bookmarks

    @staticmethod
    def _bookmark_args(payload):
        target_type = payload.get("resource_type")
        target_id = parse_int(payload.get("resource_id"), "Resource ID", minimum=1)
        if not target_type or target_id is None:
            raise BadRequestError("Please provide resource type and ID")
        if target_type not in BOOKMARK_MODELS:
            raise BadRequestError("Invalid resource type.")
        return target_type, target_id

    @staticmethod
    def add_bookmark(user, payload):
        target_type, target_id = UserService._bookmark_args(payload)
        target = resolve_reference(target_type, target_id, BOOKMARK_MODELS)
        if target is None:
            raise NotFoundError(f"No {target_type} with id : {target_id}")
        if user.bookmarks.filter_by(target_type=target_type, target_id=target_id).first():
            raise BadRequestError("Resource already bookmarked")

        db.session.add(Bookmark(user_id=user.id, target_type=target_type, target_id=target_id))
        db.session.commit()

        if target_type == "Resource":
            with side_effect(f"notify user {user.id} of bookmark"):
                NotificationService.notify_bookmark_added(target.id, target.title, user.id)
        return target

    @staticmethod
    def remove_bookmark(user, payload):
        target_type, target_id = UserService._bookmark_args(payload)
        Bookmark.query.filter_by(user_id=user.id, target_type=target_type, target_id=target_id).delete(
            synchronize_session=False
        )
        db.session.commit()

    @staticmethod
    def resolved_bookmarks(user, limit=None):
        """Return ``(bookmark, target)`` pairs, skipping targets that no longer resolve."""
        query = user.bookmarks.order_by(Bookmark.id.asc())
        pairs = []
        for bookmark in query.all():
            target = resolve_reference(bookmark.target_type, bookmark.target_id, BOOKMARK_MODELS)
            if target is None:
                continue
            pairs.append((bookmark, target))
            if limit is not None and len(pairs) >= limit:
                break
        return pairs
