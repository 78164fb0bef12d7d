# ged/errors.py
from functools import wraps

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException


class GEDError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(GEDError):
    status_code = 404
    default_message = "Resource not found"


class ValidationError(GEDError):
    status_code = 400
    default_message = "Invalid request payload"


class ConflictError(GEDError):
    status_code = 409
    default_message = "Conflicting state"


class GoneError(GEDError):
    status_code = 410
    default_message = "Resource no longer available"


class StorageError(GEDError):
    default_message = "Storage failure"


class FilesystemError(GEDError):
    default_message = "Filesystem failure"


class MissingFileError(FilesystemError):
    status_code = 404
    default_message = "File not found on disk"


def handles_failures(message):
    """
    Frontière d'une route : les erreurs GED passent telles quelles, tout le
    reste est journalisé puis remonté comme une erreur 500 générique.
    """
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            from ged import db
            try:
                return view(*args, **kwargs)
            except (GEDError, HTTPException):
                raise
            except SQLAlchemyError as e:
                db.session.rollback()
                current_app.logger.exception("%s: %s", message, e)
                raise StorageError(message) from e
            except Exception as e:
                db.session.rollback()
                current_app.logger.exception("%s: %s", message, e)
                raise GEDError(message) from e
        return wrapper
    return decorator
