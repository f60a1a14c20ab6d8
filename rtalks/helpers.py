import re
import hmac
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Mapping, Optional


PHONE_RE = re.compile(r"^\+?[1-9]\d{0,15}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# ----------------------------
# Helpers
# ----------------------------
def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_email(email: Optional[str]) -> bool:
    if not email:
        return False
    email = email.strip()
    # simple but effective email check
    return EMAIL_RE.match(email) is not None


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_phone(phone: Optional[str]) -> bool:
    if not phone:
        return False
    return PHONE_RE.match(phone) is not None


def ct_equal(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode(), b.encode())


def plain(value: Any) -> Any:
    """Make a DB value JSON friendly (Decimal, date and time columns)."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    return value


def row_dict(row: Mapping[str, Any]) -> dict:
    return {k: plain(v) for k, v in row.items()}
