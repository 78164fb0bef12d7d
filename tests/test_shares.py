from datetime import timedelta

import pytest

from ged import mail
from ged.errors import GoneError, NotFoundError, ValidationError
from ged.models.share import DocumentShare
from ged.services.permissions import get_document_permissions, grant_permission
from ged.services.shares import create_share, redeem_share
from ged.utils.dates import utcnow
from ged.utils.db import transaction


@pytest.fixture
def document(client, upload):
    folder = client.post('/api/folders', json={'name': 'Partage'}).get_json()
    [doc] = upload(folder['id'], [('rapport.pdf', b'%PDF-1.4')]).get_json()
    return doc


# ----------------------------
# Liens de partage
# ----------------------------
def test_share_and_redeem(client, document, app):
    res = client.post(f"/api/documents/{document['id']}/share", json={'expiresIn': '2d'})
    assert res.status_code == 201
    body = res.get_json()
    assert body['success'] is True
    assert body['emailed'] is False
    assert body['share']['currentViews'] == 0
    assert body['share']['expiresAt'] is not None
    token = body['share']['shareToken']
    assert body['shareUrl'].endswith(f"/share/{token}")

    res = client.get(f"/share/{token}")
    assert res.status_code == 200
    assert res.data == b'%PDF-1.4'

    with app.app_context():
        share = DocumentShare.query.filter_by(share_token=token).one()
        assert share.current_views == 1

    actions = [a['action'] for a in client.get('/api/activity').get_json()]
    assert actions[:2] == ['view_shared_document', 'share_document']


def test_share_view_limit(client, document):
    body = client.post(f"/api/documents/{document['id']}/share", json={'maxViews': 1}).get_json()
    token = body['share']['shareToken']

    assert client.get(f"/share/{token}").status_code == 200
    res = client.get(f"/share/{token}")
    assert res.status_code == 410
    assert res.get_json()['message'] == 'Share link has reached its view limit'


def test_unknown_share_token(client):
    res = client.get('/share/not-a-token')
    assert res.status_code == 404


def test_share_validation(client, document):
    url = f"/api/documents/{document['id']}/share"
    assert client.post(url, json={'expiresIn': 'soon'}).status_code == 400
    assert client.post(url, json={'expiresIn': '0d'}).status_code == 400
    assert client.post(url, json={'maxViews': 0}).status_code == 400
    assert client.post('/api/documents/999/share', json={}).status_code == 404


def test_share_by_email(client, document):
    with mail.record_messages() as outbox:
        res = client.post(f"/api/documents/{document['id']}/share",
                          json={'recipient': 'bob@example.com', 'expiresIn': '7d'})
    assert res.get_json()['emailed'] is True
    assert len(outbox) == 1
    message = outbox[0]
    assert message.recipients == ['bob@example.com']
    assert 'rapport.pdf' in message.subject
    assert res.get_json()['shareUrl'] in message.html


def test_redeem_expired_share(make_folder, make_document):
    folder = make_folder("F")
    doc = make_document(folder.id)
    with transaction():
        share = create_share(doc.id, 1, expires_in='1h')
    token = share.share_token

    with pytest.raises(GoneError):
        redeem_share(token, now=utcnow() + timedelta(hours=2))

    with transaction():
        share, redeemed = redeem_share(token)
    assert share.current_views == 1
    assert redeemed.id == doc.id

    with pytest.raises(NotFoundError):
        redeem_share('missing')


def test_share_without_expiry(make_folder, make_document):
    folder = make_folder("F")
    doc = make_document(folder.id)
    with transaction():
        share = create_share(doc.id, 1)
    assert share.expires_at is None
    assert share.is_expired() is False
    assert len(share.share_token) >= 16


# ----------------------------
# Favoris
# ----------------------------
def test_favorite_toggle(client, document):
    url = f"/api/documents/{document['id']}/favorite"
    res = client.post(url)
    assert res.get_json() == {
        'success': True,
        'favorite': True,
        'message': 'Document favorite status updated',
    }
    assert [d['id'] for d in client.get('/api/favorites').get_json()] == [document['id']]
    assert client.get('/api/favorites', headers={'X-User-Id': '2'}).get_json() == []

    assert client.post(url).get_json()['favorite'] is False
    assert client.get('/api/favorites').get_json() == []
    assert client.post('/api/documents/999/favorite').status_code == 404


# ----------------------------
# Droits
# ----------------------------
def test_grant_permissions(make_folder, make_document):
    folder = make_folder("F")
    doc = make_document(folder.id)

    with transaction():
        grant_permission(doc.id, ['read', 'read', 'write'], user_id=2)
        grant_permission(doc.id, ['read'], user_group='comptables')
    with transaction():
        grant_permission(doc.id, ['read', 'share'], user_id=2)

    grants = get_document_permissions(doc.id)
    assert [(g.user_id, g.user_group, g.permissions) for g in grants] == [
        (2, None, ['read', 'share']),
        (None, 'comptables', ['read']),
    ]


def test_grant_permission_validation(make_folder, make_document):
    folder = make_folder("F")
    doc = make_document(folder.id)

    with pytest.raises(ValidationError):
        grant_permission(doc.id, ['read'])
    with pytest.raises(ValidationError):
        grant_permission(doc.id, ['read'], user_id=2, user_group='rh')
    with pytest.raises(ValidationError):
        grant_permission(doc.id, ['admin'], user_id=2)
    with pytest.raises(ValidationError):
        grant_permission(doc.id, [], user_id=2)
    with pytest.raises(NotFoundError):
        grant_permission(doc.id, ['read'], user_id=99)


def test_api_permissions(client, document):
    url = f"/api/documents/{document['id']}/permissions"
    res = client.post(url, json={'userGroup': 'direction', 'permissions': ['read', 'delete']})
    assert res.status_code == 201
    assert res.get_json()['userGroup'] == 'direction'

    listing = client.get(url).get_json()
    assert [p['permissions'] for p in listing] == [['read', 'delete']]
    assert client.post(url, json={'permissions': ['read']}).status_code == 400


def test_share_email_escapes_document_name(client, document):
    client.put(f"/api/documents/{document['id']}", json={'name': '<script>alert(1)</script>.txt'})

    with mail.record_messages() as outbox:
        client.post(f"/api/documents/{document['id']}/share", json={'recipient': 'bob@example.com'})
    html = outbox[0].html
    assert '<script>' not in html
    assert '&lt;script&gt;alert(1)&lt;/script&gt;.txt' in html
