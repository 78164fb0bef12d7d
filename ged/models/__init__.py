# ged/models/__init__.py
from .user import User, UserRole
from .folder import Folder, FolderType
from .document import Document, DocumentStatus
from .permission import DocumentPermission, PERMISSION_CHOICES
from .share import DocumentShare
from .activity import ActivityLog
from .favorite import Favorite

__all__ = [
    'User', 'UserRole',
    'Folder', 'FolderType',
    'Document', 'DocumentStatus',
    'DocumentPermission', 'PERMISSION_CHOICES',
    'DocumentShare', 'ActivityLog', 'Favorite',
]
