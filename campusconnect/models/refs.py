"""Resolution of tagged (kind, id) references to concrete rows."""

from campusconnect.extensions import db
from campusconnect.models.achievement import Achievement
from campusconnect.models.course import Course
from campusconnect.models.resource import Resource
from campusconnect.models.resource_request import ResourceRequest
from campusconnect.models.study_group import StudyGroup

RELATED_MODELS = {
    "Resource": Resource,
    "StudyGroup": StudyGroup,
    "ResourceRequest": ResourceRequest,
    "Achievement": Achievement,
    "Course": Course,
}

BOOKMARK_MODELS = {
    "Resource": Resource,
    "StudyGroup": StudyGroup,
}


def resolve_reference(kind, ident, table=RELATED_MODELS):
    """Return the row a (kind, id) pair points to, or None.

    Soft-deleted rows resolve to None, the same as missing ones.
    """
    model = table.get(kind)
    if model is None or ident is None:
        return None
    row = db.session.get(model, ident)
    if row is None or not getattr(row, "is_active", True):
        return None
    return row
