# ged/services/permissions.py
from ged import db
from ged.errors import NotFoundError, ValidationError
from ged.models.permission import DocumentPermission, PERMISSION_CHOICES
from ged.models.user import User
from ged.services.documents import get_document_or_404
from ged.utils.parsing import parse_int


def validate_permissions(permissions):
    if not isinstance(permissions, list) or not permissions:
        raise ValidationError("permissions must be a non-empty list")
    cleaned = []
    for perm in permissions:
        if perm not in PERMISSION_CHOICES:
            raise ValidationError(f"Invalid permission: {perm!r} (expected one of {', '.join(PERMISSION_CHOICES)})")
        if perm not in cleaned:
            cleaned.append(perm)
    return cleaned


def grant_permission(document_id, permissions, user_id=None, user_group=None):
    """
    Accorde des droits sur un document à un utilisateur OU à un groupe.
    Un nouvel octroi au même principal remplace la liste précédente.
    """
    get_document_or_404(document_id)
    user_id = parse_int(user_id, 'userId', minimum=1)
    user_group = user_group.strip() if isinstance(user_group, str) and user_group.strip() else None
    if (user_id is None) == (user_group is None):
        raise ValidationError("Exactly one of userId or userGroup is required")
    if user_id is not None and db.session.get(User, user_id) is None:
        raise NotFoundError("User not found")

    perms = validate_permissions(permissions)
    query = DocumentPermission.query.filter_by(document_id=document_id)
    if user_id is not None:
        existing = query.filter_by(user_id=user_id).first()
    else:
        existing = query.filter_by(user_group=user_group).first()

    if existing:
        existing.permissions = perms
        grant = existing
    else:
        grant = DocumentPermission(
            document_id=document_id,
            user_id=user_id,
            user_group=user_group,
            permissions=perms,
        )
        db.session.add(grant)
    db.session.flush()
    return grant


def get_document_permissions(document_id):
    get_document_or_404(document_id)
    return (
        DocumentPermission.query
        .filter_by(document_id=document_id)
        .order_by(DocumentPermission.id.asc())
        .all()
    )
