# ged/models/document.py
import enum

from ged import db
from ged.utils.dates import utcnow, isoformat


class DocumentStatus(str, enum.Enum):
    DRAFT = 'draft'
    PENDING = 'pending'
    APPROVED = 'approved'
    EXPIRED = 'expired'
    CANCELLED = 'cancelled'


class Document(db.Model):
    __tablename__ = 'documents'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    original_name = db.Column(db.String(255), nullable=False)
    folder_id = db.Column(db.Integer, db.ForeignKey('folders.id'), nullable=False, index=True)
    file_type = db.Column(db.String(50), nullable=False)
    file_size = db.Column(db.Integer, nullable=False)
    file_path = db.Column(db.Text, nullable=False)
    mime_type = db.Column(db.String(150), nullable=False)
    status = db.Column(
        db.Enum(DocumentStatus, native_enum=False, values_callable=lambda e: [m.value for m in e], length=20),
        nullable=False,
        default=DocumentStatus.DRAFT,
    )
    tags = db.Column(db.JSON, nullable=False, default=list)
    description = db.Column(db.Text)

    # === CHAÎNE DE VERSIONS ===
    version = db.Column(db.Integer, nullable=False, default=1)
    is_latest_version = db.Column(db.Boolean, nullable=False, default=True)
    parent_document_id = db.Column(db.Integer, db.ForeignKey('documents.id'))  # version précédente
    lineage_id = db.Column(db.Integer, index=True)  # id de la version 1

    expiration_date = db.Column(db.DateTime)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow)

    __table_args__ = (
        db.CheckConstraint('version >= 1', name='ck_documents_version_positive'),
    )

    # Relations
    created_by_user = db.relationship('User', foreign_keys=[created_by])
    folder = db.relationship('Folder', foreign_keys=[folder_id])

    def to_dict(self, details=False):
        data = {
            'id': self.id,
            'name': self.name,
            'originalName': self.original_name,
            'folderId': self.folder_id,
            'fileType': self.file_type,
            'fileSize': self.file_size,
            'filePath': self.file_path,
            'mimeType': self.mime_type,
            'status': self.status.value if self.status else None,
            'tags': list(self.tags or []),
            'description': self.description,
            'version': self.version,
            'isLatestVersion': self.is_latest_version,
            'parentDocumentId': self.parent_document_id,
            'lineageId': self.lineage_id,
            'expirationDate': isoformat(self.expiration_date),
            'createdBy': self.created_by,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }
        if details:
            data['createdByUser'] = self.created_by_user.to_dict() if self.created_by_user else None
            data['folder'] = self.folder.to_dict() if self.folder else None
        return data


# Une seule version "latest" par lignée, garanti par la base
db.Index(
    'uq_documents_latest_per_lineage',
    Document.lineage_id,
    unique=True,
    sqlite_where=Document.is_latest_version == True,  # noqa: E712
    postgresql_where=Document.is_latest_version == True,  # noqa: E712
)
