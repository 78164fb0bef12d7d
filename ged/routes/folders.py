# ged/routes/folders.py
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from ged.errors import NotFoundError, ValidationError, handles_failures
from ged.services.activity import log_activity
from ged.services.folders import (
    create_folder, delete_folder, get_folder_by_id, get_folders,
    get_folders_by_parent, update_folder,
)
from ged.utils.db import transaction
from ged.utils.parsing import parse_bool, parse_optional_id
from ged.utils.storage import remove_file

folders_bp = Blueprint('folders', __name__)


def get_json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object body")
    return data


@folders_bp.route('', methods=['GET'])
@login_required
@handles_failures("Failed to fetch folders")
def list_folders():
    return jsonify([folder.to_dict() for folder in get_folders()])


@folders_bp.route('/<int:folder_id>', methods=['GET'])
@login_required
@handles_failures("Failed to fetch folder")
def get_folder(folder_id):
    folder = get_folder_by_id(folder_id)
    if folder is None:
        raise NotFoundError("Folder not found")
    return jsonify(folder.to_dict())


@folders_bp.route('/<parent_id>/children', methods=['GET'])
@login_required
@handles_failures("Failed to fetch folder children")
def list_children(parent_id):
    parent_id = parse_optional_id(parent_id, 'parentId')
    return jsonify([folder.to_dict() for folder in get_folders_by_parent(parent_id)])


#route pour créer un dossier (racine ou sous-dossier)
@folders_bp.route('', methods=['POST'])
@login_required
@handles_failures("Failed to create folder")
def create_folder_route():
    data = get_json_body()
    with transaction():
        folder = create_folder(
            name=data.get('name'),
            parent_id=parse_optional_id(data.get('parentId'), 'parentId'),
            type=data.get('type'),
            permissions=data.get('permissions'),
            created_by=current_user.id,
        )
        log_activity(current_user.id, 'create_folder', 'folder', folder.id)
    return jsonify(folder.to_dict()), 201


#route pour renommer / déplacer un dossier
@folders_bp.route('/<int:folder_id>', methods=['PUT'])
@login_required
@handles_failures("Failed to update folder")
def update_folder_route(folder_id):
    data = get_json_body()
    with transaction():
        folder = update_folder(folder_id, data)
        log_activity(current_user.id, 'update_folder', 'folder', folder.id,
                     {'fields': sorted(data.keys()), 'path': folder.path})
    return jsonify(folder.to_dict())


#route pour supprimer un dossier
@folders_bp.route('/<int:folder_id>', methods=['DELETE'])
@login_required
@handles_failures("Failed to delete folder")
def delete_folder_route(folder_id):
    recursive = parse_bool(request.args.get('recursive', 'false'))
    with transaction():
        file_paths = delete_folder(folder_id, recursive=recursive)
        log_activity(current_user.id, 'delete_folder', 'folder', folder_id,
                     {'recursive': recursive, 'deletedFiles': len(file_paths)})

    # suppression physique après le commit, au mieux
    for path in file_paths:
        remove_file(path)
    return jsonify({"message": "Folder deleted successfully"})
