# ged/services/shares.py
import secrets

from ged import db
from ged.errors import GoneError, NotFoundError
from ged.models.share import DocumentShare
from ged.services.documents import get_document_or_404
from ged.utils.dates import parse_duration, utcnow
from ged.utils.parsing import parse_int


def generate_share_token():
    return secrets.token_urlsafe(16)


def create_share(document_id, created_by, expires_in=None, max_views=None):
    get_document_or_404(document_id)
    duration = parse_duration(expires_in)
    share = DocumentShare(
        document_id=document_id,
        share_token=generate_share_token(),
        expires_at=utcnow() + duration if duration else None,
        max_views=parse_int(max_views, 'maxViews', minimum=1),
        current_views=0,
        created_by=created_by,
    )
    db.session.add(share)
    db.session.flush()
    return share


def get_share_by_token(token):
    return DocumentShare.query.filter_by(share_token=token).first()


def redeem_share(token, now=None):
    """
    Consomme une vue d'un lien de partage. Refusé (410) si le lien a expiré
    ou si le nombre maximal de vues est atteint.
    """
    share = get_share_by_token(token)
    if share is None:
        raise NotFoundError("Share link not found")
    if share.is_expired(now):
        raise GoneError("Share link has expired")

    # incrément conditionnel : deux consommations simultanées ne dépassent pas max_views
    updated = (
        DocumentShare.query
        .filter(
            DocumentShare.id == share.id,
            db.or_(DocumentShare.max_views.is_(None), DocumentShare.current_views < DocumentShare.max_views),
        )
        .update({DocumentShare.current_views: DocumentShare.current_views + 1}, synchronize_session=False)
    )
    if not updated:
        raise GoneError("Share link has reached its view limit")

    db.session.refresh(share)
    document = get_document_or_404(share.document_id)
    return share, document
