# ged/services/activity.py
from sqlalchemy.orm import contains_eager

from ged import db
from ged.models.activity import ActivityLog
from ged.models.user import User
from ged.utils.parsing import parse_int

DEFAULT_ACTIVITY_LIMIT = 50


def log_activity(user_id, action, resource_type, resource_id, metadata=None):
    # ajouté à l'unité de travail en cours : commit ou rollback avec l'opération
    db.session.add(ActivityLog(
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        details=dict(metadata or {}),
    ))
    db.session.flush()


def get_recent_activity(limit=DEFAULT_ACTIVITY_LIMIT):
    limit = parse_int(limit, 'limit', minimum=1) or DEFAULT_ACTIVITY_LIMIT
    return (
        ActivityLog.query
        .join(User, ActivityLog.user_id == User.id)
        .options(contains_eager(ActivityLog.user))
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )
