"""String format checkers and canonical sample literals.

Each checker takes a string and returns ``True`` when it conforms. Unknown
formats are accepted so that vendor extensions never fail validation.
"""

from __future__ import annotations

import base64
import binascii
import ipaddress
import re
import uuid
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from urllib.parse import urlparse

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DATE_TIME_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})[Tt ](\d{2}:\d{2}:\d{2})(\.\d+)?([Zz]|[+-]\d{2}:\d{2})?$")
_TIME_RE = re.compile(r"^(\d{2}):(\d{2})(?::(\d{2})(\.\d+)?)?([Zz]|[+-]\d{2}:\d{2})?$")
_HOSTNAME_LABEL_RE = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")


def is_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value))


def is_uri(value: str) -> bool:
    """Absolute URI: a scheme plus either an authority or a path."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc or parsed.path) and " " not in value


def is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def is_date(value: str) -> bool:
    if not _DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def is_date_time(value: str) -> bool:
    match = _DATE_TIME_RE.match(value)
    if match is None:
        return False
    try:
        datetime.strptime(f"{match.group(1)}T{match.group(2)}", "%Y-%m-%dT%H:%M:%S")
    except ValueError:
        return False
    return True


def is_time(value: str) -> bool:
    match = _TIME_RE.match(value)
    if match is None:
        return False
    hours, minutes, seconds = match.group(1), match.group(2), match.group(3) or "0"
    return int(hours) < 24 and int(minutes) < 60 and int(seconds) < 60


def is_ipv4(value: str) -> bool:
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        return False
    return True


def is_ipv6(value: str) -> bool:
    try:
        ipaddress.IPv6Address(value)
    except ValueError:
        return False
    return True


def is_hostname(value: str) -> bool:
    if not value or len(value) > 253:
        return False
    return all(_HOSTNAME_LABEL_RE.match(label) for label in value.rstrip(".").split("."))


def is_byte(value: str) -> bool:
    try:
        base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


FORMAT_CHECKERS: dict[str, Callable[[str], bool]] = {
    "email": is_email,
    "uri": is_uri,
    "url": is_uri,
    "uuid": is_uuid,
    "guid": is_uuid,
    "date-time": is_date_time,
    "date": is_date,
    "time": is_time,
    "ipv4": is_ipv4,
    "ipv6": is_ipv6,
    "hostname": is_hostname,
    "byte": is_byte,
}


def check_format(format_name: str, value: str) -> bool:
    """Return ``True`` if *value* satisfies *format_name*.

    Formats without a registered checker always pass.
    """
    checker = FORMAT_CHECKERS.get(format_name.lower())
    return checker is None or checker(value)


def sample_for_format(format_name: str | None, salt: int = 0) -> str:
    """Return a canonical literal that satisfies *format_name*.

    Args:
        format_name: The declared format, or ``None`` for a plain string.
        salt: Non-zero values produce distinct literals of the same format,
            used when generating arrays with unique items.
    """
    name = (format_name or "").lower()
    now = datetime.now(timezone.utc).replace(microsecond=0) + timedelta(seconds=salt)
    if name == "email":
        return f"user{salt}@example.com" if salt else "user@example.com"
    if name in ("uri", "url"):
        return f"https://example.com/{salt}" if salt else "https://example.com"
    if name in ("uuid", "guid"):
        return str(uuid.uuid4())
    if name == "date-time":
        return now.isoformat()
    if name == "date":
        return (date.today() + timedelta(days=salt)).isoformat()
    if name == "time":
        return now.strftime("%H:%M:%S")
    if name == "ipv4":
        return f"192.168.{1 + salt // 254 % 255}.{1 + salt % 254}"
    if name == "ipv6":
        return f"::{salt % 0xFFFF + 1:x}"
    if name == "hostname":
        return f"host{salt}.example.com" if salt else "example.com"
    if name == "byte":
        text = f"sample{salt}" if salt else "sample"
        return base64.b64encode(text.encode("utf-8")).decode("ascii")
    return f"string{salt}" if salt else "string"
