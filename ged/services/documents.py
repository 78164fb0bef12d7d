# ged/services/documents.py
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import contains_eager

from ged import db
from ged.errors import ConflictError, NotFoundError, ValidationError
from ged.models.document import Document, DocumentStatus
from ged.models.favorite import Favorite
from ged.models.folder import Folder
from ged.models.permission import DocumentPermission
from ged.models.share import DocumentShare
from ged.models.user import User
from ged.utils.dates import parse_datetime, utcnow
from ged.utils.parsing import normalize_tags, parse_enum, parse_int, require_name

UPDATABLE_FIELDS = ('name', 'folderId', 'tags', 'description', 'status', 'expirationDate')


def get_document_or_404(document_id):
    document = db.session.get(Document, document_id)
    if document is None:
        raise NotFoundError("Document not found")
    return document


def _ensure_folder(folder_id):
    folder_id = parse_int(folder_id, 'folderId', required=True, minimum=1)
    if db.session.get(Folder, folder_id) is None:
        raise NotFoundError("Folder not found")
    return folder_id


def _with_details():
    # jointures internes : créateur et dossier obligatoires, comme pour la liste
    return (
        Document.query
        .join(User, Document.created_by == User.id)
        .join(Folder, Document.folder_id == Folder.id)
        .options(contains_eager(Document.created_by_user), contains_eager(Document.folder))
    )


# === LECTURE ===
def get_documents(folder_id=None):
    query = _with_details().filter(Document.is_latest_version.is_(True))
    if folder_id is not None:
        query = query.filter(Document.folder_id == folder_id)
    return query.order_by(Document.created_at.desc(), Document.id.desc()).all()


def get_document_by_id(document_id):
    return _with_details().filter(Document.id == document_id).first()


def get_document_versions(document_id):
    document = get_document_or_404(document_id)
    return (
        Document.query
        .filter(Document.lineage_id == (document.lineage_id or document.id))
        .order_by(Document.version.asc())
        .all()
    )


def search_documents(query, file_type=None, status=None, created_by=None,
                     tags=None, date_from=None, date_to=None):
    """
    Recherche par sous-chaîne (LIKE) sur le nom, le nom d'origine et la
    description des dernières versions. Chaque filtre présent ajoute un ET.
    """
    text = query or ''
    conditions = [
        Document.is_latest_version.is_(True),
        db.or_(
            Document.name.contains(text, autoescape=True),
            Document.original_name.contains(text, autoescape=True),
            Document.description.contains(text, autoescape=True),
        ),
    ]

    if file_type:
        conditions.append(Document.file_type == file_type)
    if status:
        conditions.append(Document.status == parse_enum(DocumentStatus, status, 'status'))
    if created_by is not None:
        conditions.append(Document.created_by == created_by)
    if date_from is not None:
        conditions.append(Document.created_at >= date_from)
    if date_to is not None:
        conditions.append(Document.created_at <= date_to)

    results = (
        _with_details()
        .filter(db.and_(*conditions))
        .order_by(Document.created_at.desc(), Document.id.desc())
        .all()
    )

    # tags stockés en JSON : filtrage côté application, tous les tags demandés requis
    wanted = normalize_tags(tags)
    if wanted:
        results = [doc for doc in results if set(wanted).issubset(doc.tags or [])]
    return results


# === ÉCRITURE ===
def create_document(meta, created_by):
    """Insère la version 1 d'une nouvelle lignée."""
    document = Document(
        name=require_name(meta.get('name') or meta.get('originalName')),
        original_name=require_name(meta.get('originalName'), 'originalName'),
        folder_id=_ensure_folder(meta.get('folderId')),
        file_type=meta.get('fileType') or '',
        file_size=parse_int(meta.get('fileSize'), 'fileSize', required=True, minimum=0),
        file_path=require_name(meta.get('filePath'), 'filePath'),
        mime_type=meta.get('mimeType') or 'application/octet-stream',
        status=parse_enum(DocumentStatus, meta.get('status') or DocumentStatus.DRAFT, 'status'),
        tags=normalize_tags(meta.get('tags')),
        description=meta.get('description'),
        expiration_date=parse_datetime(meta.get('expirationDate'), 'expirationDate'),
        version=1,
        is_latest_version=True,
        parent_document_id=None,
        created_by=created_by,
    )
    db.session.add(document)
    db.session.flush()
    document.lineage_id = document.id
    db.session.flush()
    return document


def create_document_version(document_id, meta, created_by):
    """
    Nouvelle version d'une lignée : la dernière version est rétrogradée puis la
    nouvelle ligne est insérée, dans la même unité de travail que l'appelant.
    """
    document = get_document_or_404(document_id)
    lineage_id = document.lineage_id or document.id

    latest = (
        Document.query
        .filter(Document.lineage_id == lineage_id, Document.is_latest_version.is_(True))
        .with_for_update()
        .first()
    )
    if latest is None:
        raise ConflictError("No latest version found for this document")

    try:
        latest.is_latest_version = False
        db.session.flush()

        new_version = Document(
            name=meta.get('name') or latest.name,
            original_name=require_name(meta.get('originalName'), 'originalName'),
            folder_id=_ensure_folder(meta['folderId']) if meta.get('folderId') else latest.folder_id,
            file_type=meta.get('fileType') or '',
            file_size=parse_int(meta.get('fileSize'), 'fileSize', required=True, minimum=0),
            file_path=require_name(meta.get('filePath'), 'filePath'),
            mime_type=meta.get('mimeType') or 'application/octet-stream',
            tags=normalize_tags(meta['tags']) if meta.get('tags') is not None else list(latest.tags or []),
            description=meta.get('description', latest.description),
            expiration_date=(
                parse_datetime(meta['expirationDate'], 'expirationDate')
                if 'expirationDate' in meta else latest.expiration_date
            ),
            status=DocumentStatus.DRAFT,
            version=latest.version + 1,
            is_latest_version=True,
            parent_document_id=latest.id,
            lineage_id=lineage_id,
            created_by=created_by,
        )
        db.session.add(new_version)
        db.session.flush()
        if new_version.folder_id != latest.folder_id:
            move_lineage(lineage_id, new_version.folder_id)
    except IntegrityError as e:
        raise ConflictError("Another version was created concurrently") from e
    return new_version


def move_lineage(lineage_id, folder_id):
    """Toutes les versions d'une lignée vivent dans le même dossier."""
    Document.query.filter(db.or_(Document.lineage_id == lineage_id, Document.id == lineage_id)).update(
        {Document.folder_id: folder_id}, synchronize_session='fetch',
    )
    db.session.flush()


def update_document(document_id, changes):
    document = get_document_or_404(document_id)

    if 'name' in changes:
        document.name = require_name(changes['name'])
    if 'folderId' in changes:
        move_lineage(document.lineage_id or document.id, _ensure_folder(changes['folderId']))
    if 'tags' in changes:
        document.tags = normalize_tags(changes['tags'])
    if 'description' in changes:
        description = changes['description']
        if description is not None and not isinstance(description, str):
            raise ValidationError("description must be a string")
        document.description = description
    if 'status' in changes:
        document.status = parse_enum(DocumentStatus, changes['status'], 'status')
    if 'expirationDate' in changes:
        document.expiration_date = parse_datetime(changes['expirationDate'], 'expirationDate')

    document.updated_at = utcnow()
    db.session.flush()
    return document


def _delete_dependents(document_ids):
    for model in (Favorite, DocumentShare, DocumentPermission):
        model.query.filter(model.document_id.in_(document_ids)).delete(synchronize_session=False)


def delete_document(document_id):
    """
    Supprime une version. La version suivante est rattachée au parent de la
    version supprimée et, si c'était la dernière, la plus récente restante
    redevient "latest". Retourne le chemin du fichier à effacer.
    """
    document = get_document_or_404(document_id)
    lineage_id = document.lineage_id or document.id
    was_latest = document.is_latest_version
    file_path = document.file_path

    Document.query.filter(Document.parent_document_id == document.id).update(
        {Document.parent_document_id: document.parent_document_id},
        synchronize_session=False,
    )
    _delete_dependents([document.id])
    db.session.delete(document)
    db.session.flush()

    if was_latest:
        previous = (
            Document.query
            .filter(Document.lineage_id == lineage_id)
            .order_by(Document.version.desc())
            .first()
        )
        if previous is not None:
            previous.is_latest_version = True
            db.session.flush()
    return file_path


def purge_documents(documents):
    """Supprime des documents entiers (toutes versions comprises) et renvoie leurs fichiers."""
    if not documents:
        return []
    lineage_ids = {doc.lineage_id or doc.id for doc in documents}
    rows = Document.query.filter(
        db.or_(Document.lineage_id.in_(lineage_ids), Document.id.in_([doc.id for doc in documents]))
    ).all()

    file_paths = [row.file_path for row in rows]
    _delete_dependents([row.id for row in rows])
    # détacher la chaîne avant suppression
    for row in rows:
        row.parent_document_id = None
    db.session.flush()
    for row in rows:
        db.session.delete(row)
    db.session.flush()
    return file_paths
