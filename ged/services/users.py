# ged/services/users.py
from flask import current_app

from ged import db
from ged.errors import ValidationError
from ged.models.user import User, UserRole
from ged.utils.parsing import parse_enum, require_name
from ged.utils.db import transaction

# Arborescence créée au premier démarrage
DEFAULT_FOLDER_TREE = (
    ("Comptabilité", ("Factures", "Devis")),
    ("Ressources Humaines", ()),
    ("Achats", ()),
    ("Projets Import", ("DUM", "Quittances")),
)


def get_user(user_id):
    return db.session.get(User, user_id)


def get_user_by_username(username):
    return User.query.filter_by(username=username).first()


def create_user(username, email, first_name=None, last_name=None, role=UserRole.USER):
    username = require_name(username, 'username')
    email = require_name(email, 'email')
    if User.query.filter((User.username == username) | (User.email == email)).first():
        raise ValidationError("username or email already exists")

    user = User(
        username=username,
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=parse_enum(UserRole, role, 'role'),
    )
    db.session.add(user)
    db.session.flush()
    return user


def seed_defaults():
    """
    Crée l'utilisateur admin et l'arborescence par défaut si l'admin n'existe pas.
    Retourne True si quelque chose a été créé.
    """
    from ged.services.folders import create_folder

    if get_user_by_username("admin"):
        return False

    with transaction():
        admin = create_user(
            username="admin",
            email="admin@example.com",
            first_name="Admin",
            last_name="User",
            role=UserRole.ADMIN,
        )
        for root_name, children in DEFAULT_FOLDER_TREE:
            root = create_folder(root_name, None, created_by=admin.id)
            for child_name in children:
                create_folder(child_name, root.id, created_by=admin.id)

    current_app.logger.info("Default admin user and folder tree created (admin id=%s)", admin.id)
    return True
