# ged/models/user.py
import enum

from flask_login import UserMixin
from ged import db
from ged.utils.dates import utcnow, isoformat


class UserRole(str, enum.Enum):
    ADMIN = 'admin'
    USER = 'user'
    VIEWER = 'viewer'


class User(UserMixin, db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(150), unique=True, nullable=False)
    email = db.Column(db.String(150), unique=True, nullable=False)
    first_name = db.Column(db.String(100))
    last_name = db.Column(db.String(100))
    role = db.Column(
        db.Enum(UserRole, native_enum=False, values_callable=lambda e: [m.value for m in e], length=20),
        nullable=False,
        default=UserRole.USER,
    )
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow)

    @property
    def display_name(self):
        full = ' '.join(part for part in (self.first_name, self.last_name) if part)
        return full or self.username

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'role': self.role.value if self.role else None,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }
