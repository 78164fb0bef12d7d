# config.py
import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default):
    return os.getenv(name, str(default)).lower() in ('1', 'true', 'yes', 'on')


def _env_extensions(name):
    raw = os.getenv(name)
    if not raw:
        return None
    return {ext.strip().lower().lstrip('.') for ext in raw.split(',') if ext.strip()}


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-change-in-production'
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL') or 'sqlite:///ged.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER') or os.path.join(BASE_DIR, 'uploads')

    # Taille maximale d'un envoi : 50 Mo
    MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', 50 * 1024 * 1024))

    # None = toutes les extensions acceptées
    ALLOWED_EXTENSIONS = _env_extensions('ALLOWED_EXTENSIONS')

    # ==========================================================
    # Utilisateur courant (pas d'authentification réelle)
    # ==========================================================
    DEFAULT_USER_ID = int(os.getenv('DEFAULT_USER_ID', 1))
    ACTING_USER_HEADER = os.getenv('ACTING_USER_HEADER', 'X-User-Id')

    SEED_DEFAULTS = _env_flag('SEED_DEFAULTS', True)
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # Partage et statistiques
    SHARE_DEFAULT_EXPIRES_IN = os.getenv('SHARE_DEFAULT_EXPIRES_IN', '7d')
    EXPIRING_SOON_DAYS = int(os.getenv('EXPIRING_SOON_DAYS', 7))

    # ==========================================================
    # Configuration Email
    # ==========================================================
    MAIL_SERVER = os.getenv('MAIL_SERVER', 'localhost')
    MAIL_PORT = int(os.getenv('MAIL_PORT', 25))
    MAIL_USE_TLS = _env_flag('MAIL_USE_TLS', False)
    MAIL_USE_SSL = _env_flag('MAIL_USE_SSL', False)
    MAIL_USERNAME = os.getenv('MAIL_USERNAME')
    MAIL_PASSWORD = os.getenv('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.getenv('MAIL_DEFAULT_SENDER', 'GED <no-reply@ged.local>')
