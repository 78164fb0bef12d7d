# ged/routes/documents.py
from flask import Blueprint, current_app, jsonify, request, send_file, url_for
from flask_login import current_user, login_required

from ged.errors import MissingFileError, NotFoundError, ValidationError, handles_failures
from ged.models.document import DocumentStatus
from ged.services.activity import log_activity
from ged.services.documents import (
    UPDATABLE_FIELDS, create_document, create_document_version, delete_document,
    get_document_by_id, get_document_or_404, get_document_versions, get_documents,
    search_documents, update_document,
)
from ged.services.favorites import get_favorites, toggle_favorite
from ged.services.permissions import get_document_permissions, grant_permission
from ged.services.folders import get_folder_by_id
from ged.services.shares import create_share
from ged.utils.dates import parse_datetime
from ged.utils.db import transaction
from ged.utils.email import send_share_link
from ged.utils.parsing import normalize_tags, parse_enum, parse_int
from ged.utils.storage import file_exists, file_type_of, mime_type_of, remove_file, save_upload

documents_bp = Blueprint('documents', __name__)


def get_json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object body")
    return data


def uploaded_files():
    # le client envoie "files" (ou "files[]" selon la librairie)
    files = request.files.getlist('files') + request.files.getlist('files[]')
    return [f for f in files if f and f.filename]


def store_and_record(file, record):
    """
    Écrit le fichier puis enregistre la ligne via `record(meta)`. Si l'écriture en
    base échoue, le fichier déjà stocké est supprimé.
    """
    filepath, size = save_upload(file)
    meta = {
        'name': file.filename,
        'originalName': file.filename,
        'fileType': file_type_of(file.filename),
        'fileSize': size,
        'filePath': filepath,
        'mimeType': mime_type_of(file),
    }
    try:
        return record(meta)
    except Exception:
        remove_file(filepath)
        raise


# === LISTE / DÉTAIL ===
@documents_bp.route('/documents', methods=['GET'])
@login_required
@handles_failures("Failed to fetch documents")
def list_documents():
    folder_id = parse_int(request.args.get('folderId'), 'folderId', minimum=1)
    return jsonify([doc.to_dict(details=True) for doc in get_documents(folder_id)])


@documents_bp.route('/documents/<int:document_id>', methods=['GET'])
@login_required
@handles_failures("Failed to fetch document")
def get_document(document_id):
    document = get_document_by_id(document_id)
    if document is None:
        raise NotFoundError("Document not found")
    return jsonify(document.to_dict(details=True))


@documents_bp.route('/search', methods=['GET'])
@login_required
@handles_failures("Failed to search documents")
def search():
    args = request.args
    status = args.get('status') or None
    documents = search_documents(
        args.get('q', ''),
        file_type=args.get('fileType') or None,
        status=parse_enum(DocumentStatus, status, 'status') if status else None,
        created_by=parse_int(args.get('createdBy'), 'createdBy'),
        tags=args.get('tags') or None,
        date_from=parse_datetime(args.get('dateFrom'), 'dateFrom'),
        date_to=parse_datetime(args.get('dateTo'), 'dateTo'),
    )
    return jsonify([doc.to_dict(details=True) for doc in documents])


# === ENVOI ===
@documents_bp.route('/documents/upload', methods=['POST'])
@login_required
@handles_failures("Failed to upload documents")
def upload_documents():
    files = uploaded_files()
    if not files:
        raise ValidationError("No files uploaded")

    folder_id = parse_int(request.form.get('folderId'), 'folderId', required=True, minimum=1)
    if get_folder_by_id(folder_id) is None:
        raise NotFoundError("Folder not found")
    tags = normalize_tags(request.form.get('tags'))
    description = request.form.get('description') or None

    uploaded = []
    for file in files:
        def record(meta):
            meta.update(folderId=folder_id, tags=tags, description=description)
            with transaction():
                document = create_document(meta, created_by=current_user.id)
                log_activity(current_user.id, 'upload_document', 'document', document.id)
            return document

        uploaded.append(store_and_record(file, record))
        current_app.logger.info("Document uploaded: %s (%s bytes)", file.filename, uploaded[-1].file_size)

    return jsonify([doc.to_dict() for doc in uploaded]), 201


# === VERSIONS ===
@documents_bp.route('/documents/<int:document_id>/versions', methods=['GET'])
@login_required
@handles_failures("Failed to fetch document versions")
def list_versions(document_id):
    return jsonify([doc.to_dict() for doc in get_document_versions(document_id)])


@documents_bp.route('/documents/<int:document_id>/versions', methods=['POST'])
@login_required
@handles_failures("Failed to create document version")
def create_version(document_id):
    get_document_or_404(document_id)
    file = request.files.get('file')
    if not file or not file.filename:
        raise ValidationError("No file uploaded")

    form = request.form

    def record(meta):
        if 'tags' in form:
            meta['tags'] = normalize_tags(form.get('tags'))
        if 'description' in form:
            meta['description'] = form.get('description') or None
        meta.pop('name')
        with transaction():
            document = create_document_version(document_id, meta, created_by=current_user.id)
            log_activity(current_user.id, 'create_version', 'document', document.id,
                         {'version': document.version, 'previousId': document.parent_document_id})
        return document

    document = store_and_record(file, record)
    return jsonify(document.to_dict()), 201


# === MODIFICATION / SUPPRESSION ===
@documents_bp.route('/documents/<int:document_id>', methods=['PUT'])
@login_required
@handles_failures("Failed to update document")
def update_document_route(document_id):
    data = get_json_body()
    changes = {key: value for key, value in data.items() if key in UPDATABLE_FIELDS}
    with transaction():
        document = update_document(document_id, changes)
        log_activity(current_user.id, 'update_document', 'document', document_id,
                     {'fields': sorted(changes.keys())})
    return jsonify(document.to_dict())


@documents_bp.route('/documents/<int:document_id>', methods=['DELETE'])
@login_required
@handles_failures("Failed to delete document")
def delete_document_route(document_id):
    with transaction():
        file_path = delete_document(document_id)
        log_activity(current_user.id, 'delete_document', 'document', document_id)

    # fichier absent ou verrouillé : la ligne est supprimée quand même
    remove_file(file_path)
    return jsonify({"message": "Document deleted successfully"})


@documents_bp.route('/documents/<int:document_id>/download', methods=['GET'])
@login_required
@handles_failures("Failed to download document")
def download_document(document_id):
    document = get_document_or_404(document_id)
    if not file_exists(document.file_path):
        raise MissingFileError()

    with transaction():
        log_activity(current_user.id, 'download_document', 'document', document_id)
    return send_file(
        document.file_path,
        as_attachment=True,
        download_name=document.original_name,
        mimetype=document.mime_type,
    )


# === FAVORIS ===
@documents_bp.route('/documents/<int:document_id>/favorite', methods=['POST'])
@login_required
@handles_failures("Failed to update favorite status")
def favorite_document(document_id):
    with transaction():
        is_favorite = toggle_favorite(current_user.id, document_id)
        log_activity(current_user.id, 'favorite_document', 'document', document_id,
                     {'favorite': is_favorite})
    return jsonify({
        "success": True,
        "favorite": is_favorite,
        "message": "Document favorite status updated",
    })


@documents_bp.route('/favorites', methods=['GET'])
@login_required
@handles_failures("Failed to fetch favorites")
def favorites():
    return jsonify([doc.to_dict() for doc in get_favorites(current_user.id)])


# === PARTAGE ===
@documents_bp.route('/documents/<int:document_id>/share', methods=['POST'])
@login_required
@handles_failures("Failed to create share link")
def share_document(document_id):
    data = request.get_json(silent=True) or {}
    expires_in = data.get('expiresIn', current_app.config.get('SHARE_DEFAULT_EXPIRES_IN'))
    recipient = data.get('recipient')

    with transaction():
        share = create_share(document_id, current_user.id,
                             expires_in=expires_in, max_views=data.get('maxViews'))
        share_url = url_for('shares.redeem', token=share.share_token, _external=True)
        log_activity(current_user.id, 'share_document', 'document', document_id, {
            'shareToken': share.share_token,
            'expiresIn': expires_in,
            'shareUrl': share_url,
        })

    emailed = False
    if recipient:
        emailed = send_share_link(recipient, get_document_or_404(document_id), share_url,
                                  expires_at=share.expires_at, sender_user=current_user)

    return jsonify({
        "success": True,
        "shareUrl": share_url,
        "share": share.to_dict(),
        "emailed": emailed,
        "message": "Share link created successfully",
    }), 201


# === DROITS ===
@documents_bp.route('/documents/<int:document_id>/permissions', methods=['GET'])
@login_required
@handles_failures("Failed to fetch document permissions")
def list_permissions(document_id):
    return jsonify([perm.to_dict() for perm in get_document_permissions(document_id)])


@documents_bp.route('/documents/<int:document_id>/permissions', methods=['POST'])
@login_required
@handles_failures("Failed to grant document permission")
def grant_permission_route(document_id):
    data = get_json_body()
    with transaction():
        grant = grant_permission(
            document_id,
            data.get('permissions'),
            user_id=data.get('userId'),
            user_group=data.get('userGroup'),
        )
        log_activity(current_user.id, 'grant_permission', 'document', document_id, {
            'userId': grant.user_id,
            'userGroup': grant.user_group,
            'permissions': grant.permissions,
        })
    return jsonify(grant.to_dict()), 201
