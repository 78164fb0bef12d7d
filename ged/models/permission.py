# ged/models/permission.py
from ged import db
from ged.utils.dates import utcnow, isoformat

PERMISSION_CHOICES = ('read', 'write', 'share', 'delete')


class DocumentPermission(db.Model):
    __tablename__ = 'document_permissions'
    id = db.Column(db.Integer, primary_key=True)
    document_id = db.Column(db.Integer, db.ForeignKey('documents.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    user_group = db.Column(db.String(100))
    permissions = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime, default=utcnow)

    __table_args__ = (
        # soit un utilisateur, soit un groupe, jamais les deux
        db.CheckConstraint(
            '(user_id IS NULL) != (user_group IS NULL)',
            name='ck_document_permissions_one_principal',
        ),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'documentId': self.document_id,
            'userId': self.user_id,
            'userGroup': self.user_group,
            'permissions': list(self.permissions or []),
            'createdAt': isoformat(self.created_at),
        }
