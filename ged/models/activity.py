# ged/models/activity.py
from ged import db
from ged.utils.dates import utcnow, isoformat


class ActivityLog(db.Model):
    __tablename__ = 'activity_log'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    action = db.Column(db.String(50), nullable=False)  # upload_document, create_folder, share_document...
    resource_type = db.Column(db.String(50), nullable=False)  # document, folder
    resource_id = db.Column(db.Integer, nullable=False)
    # "metadata" est réservé par SQLAlchemy côté classe
    details = db.Column('metadata', db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime, default=utcnow, index=True)

    user = db.relationship('User')

    def to_dict(self, with_user=False):
        data = {
            'id': self.id,
            'userId': self.user_id,
            'action': self.action,
            'resourceType': self.resource_type,
            'resourceId': self.resource_id,
            'metadata': self.details or {},
            'createdAt': isoformat(self.created_at),
        }
        if with_user:
            data['user'] = self.user.to_dict() if self.user else None
        return data
