# ged/services/folders.py
from ged import db
from ged.errors import ConflictError, NotFoundError, ValidationError
from ged.models.document import Document
from ged.models.folder import Folder, FolderType
from ged.utils.dates import utcnow
from ged.utils.parsing import parse_enum, parse_optional_id, require_name


def validate_folder_name(name):
    name = require_name(name)
    if '/' in name:
        raise ValidationError("Folder name must not contain '/'")
    return name


def validate_folder_permissions(permissions):
    """Map principal -> liste de capacités."""
    if permissions is None:
        return {}
    if not isinstance(permissions, dict):
        raise ValidationError("permissions must be an object")
    for principal, capabilities in permissions.items():
        if not isinstance(capabilities, list) or not all(isinstance(c, str) for c in capabilities):
            raise ValidationError(f"permissions for {principal!r} must be a list of strings")
    return dict(permissions)


def compute_path(parent, name):
    return f"{parent.path}/{name}" if parent else name


def get_folder_or_404(folder_id):
    folder = db.session.get(Folder, folder_id)
    if folder is None:
        raise NotFoundError("Folder not found")
    return folder


# === LECTURE ===
def get_folders():
    return Folder.query.order_by(Folder.path.asc()).all()


def get_folder_by_id(folder_id):
    return db.session.get(Folder, folder_id)


def get_folders_by_parent(parent_id):
    if parent_id is None:
        condition = Folder.parent_id.is_(None)
    else:
        condition = Folder.parent_id == parent_id
    return Folder.query.filter(condition).order_by(Folder.name.asc()).all()


def get_descendant_ids(folder_id):
    """Ids de tous les descendants (parcours en largeur par requêtes sur parent_id)."""
    found = []
    frontier = [folder_id]
    while frontier:
        rows = db.session.query(Folder.id).filter(Folder.parent_id.in_(frontier)).all()
        frontier = [row.id for row in rows if row.id not in found and row.id != folder_id]
        found.extend(frontier)
    return found


# === ÉCRITURE ===
def create_folder(name, parent_id=None, type=FolderType.STANDARD, permissions=None, created_by=None):
    name = validate_folder_name(name)
    parent = get_folder_or_404(parent_id) if parent_id is not None else None

    folder = Folder(
        name=name,
        parent_id=parent.id if parent else None,
        path=compute_path(parent, name),
        type=parse_enum(FolderType, type or FolderType.STANDARD, 'type'),
        permissions=validate_folder_permissions(permissions),
        created_by=created_by,
    )
    db.session.add(folder)
    db.session.flush()
    return folder


def _ensure_not_cycle(folder, new_parent):
    # remonte la chaîne des parents du nouveau parent jusqu'à la racine
    seen = set()
    current = new_parent
    while current is not None:
        if current.id == folder.id:
            raise ValidationError("A folder cannot be moved into itself or one of its descendants")
        if current.id in seen:
            break
        seen.add(current.id)
        current = db.session.get(Folder, current.parent_id) if current.parent_id else None


def rebuild_descendant_paths(folder):
    """Recalcule le chemin de chaque descendant à partir de celui de `folder`."""
    updated = 0
    frontier = [folder]
    visited = {folder.id}
    while frontier:
        next_frontier = []
        for parent in frontier:
            for child in Folder.query.filter(Folder.parent_id == parent.id).all():
                if child.id in visited:
                    continue
                visited.add(child.id)
                child.path = compute_path(parent, child.name)
                next_frontier.append(child)
                updated += 1
        frontier = next_frontier
    return updated


def update_folder(folder_id, changes):
    folder = get_folder_or_404(folder_id)
    moved = False

    if 'name' in changes:
        name = validate_folder_name(changes['name'])
        moved = moved or name != folder.name
        folder.name = name

    if 'parentId' in changes:
        new_parent_id = parse_optional_id(changes['parentId'], 'parentId')
        new_parent = get_folder_or_404(new_parent_id) if new_parent_id is not None else None
        if new_parent is not None:
            _ensure_not_cycle(folder, new_parent)
        moved = moved or new_parent_id != folder.parent_id
        folder.parent_id = new_parent_id

    if 'type' in changes:
        folder.type = parse_enum(FolderType, changes['type'], 'type')

    if 'permissions' in changes:
        folder.permissions = validate_folder_permissions(changes['permissions'])

    if moved:
        parent = db.session.get(Folder, folder.parent_id) if folder.parent_id else None
        folder.path = compute_path(parent, folder.name)
        rebuild_descendant_paths(folder)

    folder.updated_at = utcnow()
    db.session.flush()
    return folder


def delete_folder(folder_id, recursive=False):
    """
    Supprime un dossier. Un dossier non vide est refusé sauf en mode récursif,
    qui supprime tout le sous-arbre et ses documents.
    Seules les lignées dont la dernière version est dans le sous-arbre sont
    supprimées. Retourne la liste des chemins de fichiers à effacer du disque.
    """
    from ged.services.documents import move_lineage, purge_documents

    folder = get_folder_or_404(folder_id)
    descendant_ids = get_descendant_ids(folder.id)
    folder_ids = [folder.id] + descendant_ids
    documents = Document.query.filter(
        Document.folder_id.in_(folder_ids),
        Document.is_latest_version.is_(True),
    ).all()

    if (descendant_ids or documents) and not recursive:
        raise ConflictError("Folder is not empty")

    file_paths = purge_documents(documents)

    # anciennes versions restées ici alors que la dernière est ailleurs
    strays = Document.query.filter(Document.folder_id.in_(folder_ids)).all()
    for lineage_id in {doc.lineage_id or doc.id for doc in strays}:
        latest = Document.query.filter(
            Document.lineage_id == lineage_id,
            Document.is_latest_version.is_(True),
        ).first()
        if latest is None:
            raise ConflictError("Folder contains versions without a latest version")
        move_lineage(lineage_id, latest.folder_id)

    # les feuilles d'abord pour respecter les clés étrangères
    for fid in reversed(folder_ids):
        db.session.delete(db.session.get(Folder, fid))
        db.session.flush()
    return file_paths
