import re
from datetime import datetime, timezone
from typing import Optional
from core.config import DEFAULT_CONTACT_EMAIL, DEFAULT_CONTACT_PHONE

UPI_PATTERN = re.compile(r"^[\w.-]+@[\w.-]+$")

def digits_only(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")

def mask_account_number(account_number: Optional[str]) -> str:
    digits = digits_only(account_number)
    if len(digits) <= 4:
        return "****"
    return "*" * (len(digits) - 4) + digits[-4:]

def is_valid_upi_id(upi_id: str) -> bool:
    return bool(UPI_PATTERN.match(upi_id or ""))

def contact_email(*candidates: Optional[str]) -> str:
    for email in candidates:
        if email and email.strip():
            return email.strip()[:255]
    return DEFAULT_CONTACT_EMAIL

def contact_phone(phone: Optional[str]) -> str:
    return digits_only(phone)[:15] or DEFAULT_CONTACT_PHONE

def build_reference_id(prefix: str, store_pk: int, now: datetime) -> str:
    return f"{prefix}_{store_pk}_{int(now.timestamp() * 1000)}"

def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
