# ged/models/share.py
from ged import db
from ged.utils.dates import utcnow, isoformat


class DocumentShare(db.Model):
    __tablename__ = 'document_shares'
    id = db.Column(db.Integer, primary_key=True)
    document_id = db.Column(db.Integer, db.ForeignKey('documents.id'), nullable=False, index=True)
    share_token = db.Column(db.String(64), unique=True, nullable=False)
    expires_at = db.Column(db.DateTime)
    max_views = db.Column(db.Integer)
    current_views = db.Column(db.Integer, nullable=False, default=0)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    def is_expired(self, now=None):
        return self.expires_at is not None and (now or utcnow()) > self.expires_at

    def is_exhausted(self):
        return self.max_views is not None and self.current_views >= self.max_views

    def to_dict(self):
        return {
            'id': self.id,
            'documentId': self.document_id,
            'shareToken': self.share_token,
            'expiresAt': isoformat(self.expires_at),
            'maxViews': self.max_views,
            'currentViews': self.current_views,
            'createdBy': self.created_by,
            'createdAt': isoformat(self.created_at),
        }
