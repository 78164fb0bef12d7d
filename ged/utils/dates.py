# ged/utils/dates.py
import re
from datetime import datetime, timedelta, timezone

from ged.errors import ValidationError

DURATION_UNITS = {
    's': 'seconds',
    'm': 'minutes',
    'h': 'hours',
    'd': 'days',
    'w': 'weeks',
}

_DURATION_RE = re.compile(r'^\s*(\d+)\s*([smhdw])\s*$', re.IGNORECASE)


def utcnow():
    # Dates naïves en UTC, comme stockées en base
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_datetime(value, field='date'):
    """Accepte une date ISO 8601 (avec ou sans heure). None et '' donnent None."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"Invalid {field}: {value!r}")
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def parse_duration(value):
    """'7d', '24h', '30m'... -> timedelta. Un entier nu est lu en secondes."""
    if value is None or value == '':
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        seconds = value
    else:
        text = str(value)
        if text.strip().isdigit():
            seconds = int(text)
        else:
            match = _DURATION_RE.match(text)
            if not match:
                raise ValidationError(f"Invalid duration: {value!r}")
            amount, unit = match.groups()
            if int(amount) <= 0:
                raise ValidationError(f"Invalid duration: {value!r}")
            return timedelta(**{DURATION_UNITS[unit.lower()]: int(amount)})
    if seconds <= 0:
        raise ValidationError(f"Invalid duration: {value!r}")
    return timedelta(seconds=seconds)


def isoformat(dt):
    return dt.isoformat() if dt else None
