# ged/utils/parsing.py
from ged.errors import ValidationError


def parse_int(value, field, required=False, minimum=None):
    if value is None or value == '':
        if required:
            raise ValidationError(f"{field} is required")
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}: {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}: {value!r}")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field} must be >= {minimum}")
    return number


def parse_optional_id(value, field):
    """Identifiant nullable : None, '' et 'null' donnent None."""
    if value in (None, '', 'null'):
        return None
    return parse_int(value, field, minimum=1)


def parse_enum(enum_cls, value, field):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ', '.join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field}: {value!r} (expected one of {allowed})")


def normalize_tags(value):
    """
    Tags sous forme de liste ou de chaîne séparée par des virgules.
    Espaces retirés, vides ignorés, doublons supprimés (ordre conservé).
    """
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(',')
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        raise ValidationError("tags must be a list or a comma-separated string")

    tags = []
    for item in items:
        if not isinstance(item, str):
            raise ValidationError("tags must be strings")
        tag = item.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def require_name(value, field='name'):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def parse_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).lower() in ('1', 'true', 'yes', 'on')
