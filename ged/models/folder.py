# ged/models/folder.py
import enum

from ged import db
from ged.utils.dates import utcnow, isoformat


class FolderType(str, enum.Enum):
    STANDARD = 'standard'
    SMART = 'smart'
    SECURE = 'secure'


class Folder(db.Model):
    __tablename__ = 'folders'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    # Pointeur vers le parent par id uniquement (pas de relation parent/children)
    parent_id = db.Column(db.Integer, db.ForeignKey('folders.id'), index=True)
    path = db.Column(db.Text, nullable=False)  # chemin complet "Racine/Enfant"
    type = db.Column(
        db.Enum(FolderType, native_enum=False, values_callable=lambda e: [m.value for m in e], length=20),
        nullable=False,
        default=FolderType.STANDARD,
    )
    permissions = db.Column(db.JSON, nullable=False, default=dict)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'parentId': self.parent_id,
            'path': self.path,
            'type': self.type.value if self.type else None,
            'permissions': self.permissions or {},
            'createdBy': self.created_by,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }
