# ged/utils/db.py
from contextlib import contextmanager

from ged import db


@contextmanager
def transaction():
    """Une unité de travail : commit en sortie normale, rollback sinon."""
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
