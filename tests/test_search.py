from datetime import timedelta

import pytest

from ged.errors import ValidationError
from ged.models.document import DocumentStatus
from ged.services.documents import create_document_version, search_documents
from ged.utils.dates import utcnow
from ged.utils.db import transaction


@pytest.fixture
def corpus(make_folder, make_document):
    folder = make_folder("Achats")
    docs = {
        'invoice': make_document(folder.id, "invoice-2024.pdf", tags=['finance', 'q1'],
                                 description="Facture fournisseur"),
        'quote': make_document(folder.id, "quote.docx", tags=['finance'], created_by=2),
        'memo': make_document(folder.id, "memo_100%.txt", description="Note interne",
                              status=DocumentStatus.PENDING),
    }
    return folder, docs


def names(results):
    return sorted(doc.name for doc in results)


def test_substring_on_name_and_description(corpus):
    assert names(search_documents("invoice")) == ["invoice-2024.pdf"]
    assert names(search_documents("fournisseur")) == ["invoice-2024.pdf"]
    assert len(search_documents("")) == 3


def test_filters_are_combined(corpus):
    assert names(search_documents("", file_type="pdf")) == ["invoice-2024.pdf"]
    assert names(search_documents("", created_by=2)) == ["quote.docx"]
    assert names(search_documents("", status="pending")) == ["memo_100%.txt"]
    assert search_documents("invoice", file_type="docx") == []


def test_tags_filter_requires_every_tag(corpus):
    assert names(search_documents("", tags="finance")) == ["invoice-2024.pdf", "quote.docx"]
    assert names(search_documents("", tags=['finance', 'q1'])) == ["invoice-2024.pdf"]
    assert search_documents("", tags="finance,missing") == []


def test_wildcards_are_literal(corpus):
    assert names(search_documents("100%")) == ["memo_100%.txt"]
    assert names(search_documents("o_1")) == ["memo_100%.txt"]
    assert search_documents("%") == [corpus[1]['memo']]


def test_date_range(corpus):
    now = utcnow()
    assert len(search_documents("", date_from=now - timedelta(hours=1))) == 3
    assert search_documents("", date_from=now + timedelta(hours=1)) == []
    assert search_documents("", date_to=now - timedelta(hours=1)) == []


def test_only_latest_versions_are_returned(corpus):
    _, docs = corpus
    invoice_id = docs['invoice'].id
    with transaction():
        create_document_version(invoice_id, {
            'originalName': 'invoice-2024-v2.pdf',
            'fileType': 'pdf',
            'fileSize': 1,
            'filePath': '/tmp/v2',
        }, created_by=1)

    results = search_documents("invoice")
    assert [doc.version for doc in results] == [2]


def test_invalid_status(corpus):
    with pytest.raises(ValidationError):
        search_documents("", status="lost")


def test_api_search(client, upload):
    folder = client.post('/api/folders', json={'name': 'F'}).get_json()
    upload(folder['id'], [('budget.xlsx', b'1')], tags='finance,2024')
    upload(folder['id'], [('planning.xlsx', b'2')])

    res = client.get('/api/search?q=budget')
    assert [d['name'] for d in res.get_json()] == ['budget.xlsx']
    assert res.get_json()[0]['folder']['name'] == 'F'

    res = client.get('/api/search?fileType=xlsx&tags=2024')
    assert [d['name'] for d in res.get_json()] == ['budget.xlsx']

    assert len(client.get('/api/search?fileType=xlsx').get_json()) == 2
    assert client.get('/api/search?status=unknown').status_code == 400
    assert client.get('/api/search?dateFrom=yesterday').status_code == 400
