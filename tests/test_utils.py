import re
from datetime import datetime, timedelta

import pytest

from ged.errors import ValidationError
from ged.utils.dates import parse_datetime, parse_duration
from ged.utils.parsing import normalize_tags, parse_int, parse_optional_id
from ged.utils.storage import allowed_file, file_type_of, unique_filename


@pytest.mark.parametrize("value, expected", [
    ('7d', timedelta(days=7)),
    ('24h', timedelta(hours=24)),
    ('30m', timedelta(minutes=30)),
    ('2w', timedelta(weeks=2)),
    ('90', timedelta(seconds=90)),
    (3600, timedelta(hours=1)),
])
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


@pytest.mark.parametrize("value", ['soon', '7y', '-1d', '0h', 0, 'd7'])
def test_parse_duration_rejects(value):
    with pytest.raises(ValidationError):
        parse_duration(value)


def test_parse_duration_empty():
    assert parse_duration(None) is None
    assert parse_duration('') is None


def test_parse_datetime():
    assert parse_datetime('2024-03-01') == datetime(2024, 3, 1)
    assert parse_datetime('2024-03-01T10:00:00Z') == datetime(2024, 3, 1, 10, 0)
    assert parse_datetime('2024-03-01T12:00:00+02:00') == datetime(2024, 3, 1, 10, 0)
    assert parse_datetime('') is None
    with pytest.raises(ValidationError):
        parse_datetime('01/03/2024', 'dateFrom')


def test_normalize_tags():
    assert normalize_tags(' x, y ,,x ') == ['x', 'y']
    assert normalize_tags(['b', ' a', 'b', '']) == ['b', 'a']
    assert normalize_tags(None) == []
    with pytest.raises(ValidationError):
        normalize_tags(42)
    with pytest.raises(ValidationError):
        normalize_tags(['ok', 3])


def test_parse_int():
    assert parse_int('12', 'limit') == 12
    assert parse_int(None, 'limit') is None
    with pytest.raises(ValidationError):
        parse_int(None, 'folderId', required=True)
    with pytest.raises(ValidationError):
        parse_int(True, 'limit')
    with pytest.raises(ValidationError):
        parse_int('0', 'limit', minimum=1)
    assert parse_optional_id('null', 'parentId') is None
    assert parse_optional_id('3', 'parentId') == 3


def test_file_helpers():
    assert file_type_of('Report.PDF') == 'pdf'
    assert file_type_of('README') == ''
    assert allowed_file('a.exe', None) is True
    assert allowed_file('a.pdf', {'pdf'}) is True
    assert allowed_file('a.exe', {'pdf'}) is False


def test_unique_filename():
    name = unique_filename('files', '../../Rapport annuel.PDF')
    assert re.fullmatch(r'files-\d+-\d+\.pdf', name)
