import io
import os

import pytest

from config import Config
from ged import create_app, db
from ged.models.user import UserRole
from ged.services.documents import create_document
from ged.services.folders import create_folder
from ged.services.users import create_user
from ged.utils.db import transaction


@pytest.fixture
def app(tmp_path):
    class TestConfig(Config):
        TESTING = True
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'test.db'}"
        UPLOAD_FOLDER = str(tmp_path / 'uploads')
        SEED_DEFAULTS = False
        ALLOWED_EXTENSIONS = None
        MAIL_SUPPRESS_SEND = True
        DEFAULT_USER_ID = 1

    app = create_app(TestConfig)
    with app.app_context():
        with transaction():
            create_user('admin', 'admin@example.com', 'Admin', 'User', role=UserRole.ADMIN)
            create_user('alice', 'alice@example.com', 'Alice', 'Martin', role=UserRole.USER)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    """Contexte applicatif pour tester les services directement."""
    with app.app_context():
        yield app
        db.session.rollback()


@pytest.fixture
def make_folder(ctx):
    def _make(name, parent_id=None, created_by=1):
        with transaction():
            folder = create_folder(name, parent_id, created_by=created_by)
        return folder
    return _make


@pytest.fixture
def make_document(ctx):
    """Crée un document (version 1) avec un vrai fichier dans le dossier d'upload."""
    counter = {'n': 0}

    def _make(folder_id, name='doc.txt', content=b'hello', created_by=1, **extra):
        counter['n'] += 1
        upload_folder = ctx.config['UPLOAD_FOLDER']
        os.makedirs(upload_folder, exist_ok=True)
        path = os.path.join(upload_folder, f"fixture-{counter['n']}-{name}")
        with open(path, 'wb') as f:
            f.write(content)
        meta = {
            'name': name,
            'originalName': name,
            'folderId': folder_id,
            'fileType': os.path.splitext(name)[1][1:].lower(),
            'fileSize': len(content),
            'filePath': path,
            'mimeType': 'text/plain',
        }
        meta.update(extra)
        with transaction():
            document = create_document(meta, created_by=created_by)
        return document
    return _make


@pytest.fixture
def upload(client):
    """Envoi multipart sur /api/documents/upload. `files` : liste de (nom, contenu)."""
    def _upload(folder_id, files, tags=None, headers=None):
        data = {'folderId': str(folder_id), 'files': [(io.BytesIO(content), name) for name, content in files]}
        if tags is not None:
            data['tags'] = tags
        return client.post('/api/documents/upload', data=data,
                           content_type='multipart/form-data', headers=headers or {})
    return _upload
