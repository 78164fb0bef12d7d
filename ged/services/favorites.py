# ged/services/favorites.py
from ged import db
from ged.models.document import Document
from ged.models.favorite import Favorite
from ged.services.documents import get_document_or_404


def toggle_favorite(user_id, document_id):
    """Ajoute ou retire le document des favoris. Retourne True s'il est désormais favori."""
    get_document_or_404(document_id)
    fav = Favorite.query.filter_by(user_id=user_id, document_id=document_id).first()
    if fav:
        db.session.delete(fav)
        db.session.flush()
        return False
    db.session.add(Favorite(user_id=user_id, document_id=document_id))
    db.session.flush()
    return True


def get_favorites(user_id):
    return (
        Document.query
        .join(Favorite, Favorite.document_id == Document.id)
        .filter(Favorite.user_id == user_id)
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        .all()
    )
