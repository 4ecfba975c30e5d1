# storefront/utils/parsing.py
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation


def utcnow() -> datetime:
    # naive UTC, matching how timestamps are stored
    return datetime.now(timezone.utc).replace(tzinfo=None)

def parse_iso8601(s: str | None):
    if not s:
        return None
    s = s.strip()
    # support trailing 'Z' (UTC)
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)  # store naive UTC
    return dt

def format_iso8601(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return dt.replace(tzinfo=timezone.utc).isoformat().replace("+00:00", "Z")

def parse_int(v, default=None):
    if isinstance(v, bool):
        return default
    if isinstance(v, float) and not v.is_integer():
        return default
    try:
        return int(v)
    except (TypeError, ValueError):
        return default

def parse_opt_int(v):
    if v is None:
        return None
    if isinstance(v, str) and v.strip().lower() in {"", "null"}:
        return None
    return parse_int(v)

def parse_decimal(v, default=None):
    if v is None or isinstance(v, bool):
        return default
    try:
        d = Decimal(str(v))
    except (InvalidOperation, ValueError):
        return default
    return d if d.is_finite() else default
