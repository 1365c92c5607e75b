from datetime import datetime, timezone

from sqlalchemy import String, cast, or_

from campusconnect.errors import BadRequestError, NotFoundError
from campusconnect.extensions import db


def split_tags(raw, fallback=None):
    if raw is None or raw == "":
        return list(fallback) if fallback is not None else []
    if isinstance(raw, (list, tuple)):
        items = raw
    else:
        items = str(raw).split(",")
    return [tag.strip()[:30] for tag in items if tag and str(tag).strip()]


def parse_int(value, label, minimum=None, maximum=None, default=None):
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise BadRequestError(f"{label} must be an integer.") from exc
    if minimum is not None and number < minimum:
        raise BadRequestError(f"{label} must be at least {minimum}.")
    if maximum is not None and number > maximum:
        raise BadRequestError(f"{label} must be at most {maximum}.")
    return number


def parse_datetime(value, label):
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError as exc:
            raise BadRequestError(f"Invalid {label}.") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def require_choice(value, choices, label):
    if value not in choices:
        raise BadRequestError(f"Invalid {label}.")
    return value


def get_active_or_404(model, ident, label):
    row = db.session.get(model, ident) if ident is not None else None
    if row is None or not getattr(row, "is_active", True):
        raise NotFoundError(f"No {label} with id : {ident}")
    return row


def text_search(query, term, *columns):
    """Case-insensitive substring match of ``term`` across ``columns``."""
    pattern = f"%{term.strip()}%"
    clauses = []
    for column in columns:
        if isinstance(column.type, db.JSON):
            clauses.append(cast(column, String).ilike(pattern))
        else:
            clauses.append(column.ilike(pattern))
    return query.filter(or_(*clauses))


def clean_text(value, label):
    """Strip a text field from a request body; non-strings are rejected."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise BadRequestError(f"{label} must be text.")
    return value.strip()
