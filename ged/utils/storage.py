# ged/utils/storage.py
import mimetypes
import os
import secrets
import time

from flask import current_app
from werkzeug.utils import secure_filename

from ged.errors import FilesystemError, ValidationError


# === FONCTIONS DE CONFIG DYNAMIQUE ===
def get_upload_folder():
    return current_app.config['UPLOAD_FOLDER']


def get_allowed_extensions():
    return current_app.config.get('ALLOWED_EXTENSIONS')


def file_type_of(filename):
    return os.path.splitext(filename or '')[1][1:].lower()


def allowed_file(filename, allowed_extensions):
    if not allowed_extensions:
        return True
    return file_type_of(filename) in allowed_extensions


def mime_type_of(file):
    if file.mimetype:
        return file.mimetype
    guessed, _ = mimetypes.guess_type(file.filename or '')
    return guessed or 'application/octet-stream'


def unique_filename(field, original_name):
    # <champ>-<epoch ms>-<aléatoire><ext> : pas de collision entre envois concurrents
    ext = os.path.splitext(secure_filename(original_name))[1].lower()
    return f"{field}-{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}{ext}"


def save_upload(file, field='files'):
    """Écrit le fichier envoyé dans le dossier d'upload. Retourne (chemin, taille)."""
    if not file or not file.filename:
        raise ValidationError("No file selected")
    if not allowed_file(file.filename, get_allowed_extensions()):
        raise ValidationError(f"File type not allowed: {file.filename}")

    upload_folder = get_upload_folder()
    os.makedirs(upload_folder, exist_ok=True)
    filepath = os.path.join(upload_folder, unique_filename(field, file.filename))
    try:
        file.save(filepath)
    except OSError as e:
        current_app.logger.exception("Error writing upload %s", filepath)
        raise FilesystemError("Failed to store uploaded file") from e
    return filepath, os.path.getsize(filepath)


def remove_file(filepath):
    """Suppression physique au mieux : les échecs sont journalisés, jamais levés."""
    if not filepath:
        return False
    try:
        os.remove(filepath)
        return True
    except OSError as e:
        current_app.logger.warning("Error deleting file %s: %s", filepath, e)
        return False


def file_exists(filepath):
    return bool(filepath) and os.path.isfile(filepath)
