# ged/services/stats.py
from datetime import timedelta

from flask import current_app
from sqlalchemy import case, func

from ged import db
from ged.models.document import Document, DocumentStatus
from ged.utils.dates import utcnow


def get_document_stats(now=None):
    """Compteurs sur les dernières versions, recalculés à chaque appel."""
    days = current_app.config.get('EXPIRING_SOON_DAYS', 7)
    horizon = (now or utcnow()) + timedelta(days=days)

    row = db.session.query(
        func.count(Document.id),
        func.coalesce(func.sum(case((Document.expiration_date <= horizon, 1), else_=0)), 0),
        func.coalesce(func.sum(case((Document.status == DocumentStatus.PENDING, 1), else_=0)), 0),
        func.coalesce(func.sum(Document.file_size), 0),
    ).filter(Document.is_latest_version.is_(True)).one()

    total, expiring, pending, storage = row
    return {
        'totalDocuments': int(total or 0),
        'expiringDocuments': int(expiring or 0),
        'pendingDocuments': int(pending or 0),
        'totalStorage': int(storage or 0),
    }
