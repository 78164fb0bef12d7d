# ged/routes/shares.py
from flask import Blueprint, current_app, send_file

from ged.errors import MissingFileError, handles_failures
from ged.services.activity import log_activity
from ged.services.shares import redeem_share
from ged.utils.db import transaction
from ged.utils.storage import file_exists

shares_bp = Blueprint('shares', __name__)


# route publique : ouverture d'un lien de partage (sans utilisateur courant)
@shares_bp.route('/<token>', methods=['GET'])
@handles_failures("Failed to open shared document")
def redeem(token):
    with transaction():
        share, document = redeem_share(token)
        if not file_exists(document.file_path):
            raise MissingFileError()
        # la vue est attribuée au créateur du lien
        log_activity(share.created_by, 'view_shared_document', 'document', document.id, {
            'shareToken': share.share_token,
            'currentViews': share.current_views,
        })

    current_app.logger.info("Shared document %s opened (%s views)", document.id, share.current_views)
    return send_file(
        document.file_path,
        as_attachment=True,
        download_name=document.original_name,
        mimetype=document.mime_type,
    )
