"""AES-256-GCM encryption of bank account numbers at rest.

Ciphertext layout is ``base64(iv || ciphertext || tag)`` with a 16 byte IV.
The key comes from ``BANK_VERIFICATION_ENCRYPTION_KEY``: 64 hex characters are
used as-is, anything else of at least 16 characters is hashed with SHA-256.
"""
import base64
import hashlib
import logging
import os
import re
from typing import Optional
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from core.config import BANK_VERIFICATION_ENCRYPTION_KEY

logger = logging.getLogger(__name__)

IV_LENGTH = 16
TAG_LENGTH = 16
MIN_KEY_LENGTH = 16


def _derive_key(raw: str) -> bytes:
    if len(raw) == 64 and re.fullmatch(r"[0-9a-fA-F]+", raw):
        return bytes.fromhex(raw)
    return hashlib.sha256(raw[:64].encode("utf-8")).digest()


class AccountNumberEncryptor:

    def __init__(self, key_material: Optional[str] = None):
        raw = BANK_VERIFICATION_ENCRYPTION_KEY if key_material is None else key_material
        self._key = _derive_key(raw) if raw and len(raw) >= MIN_KEY_LENGTH else None

    def is_configured(self) -> bool:
        return self._key is not None

    def encrypt(self, account_number: str) -> Optional[str]:
        """Returns None when no key is configured; encryption never blocks verification."""
        if not self._key:
            return None
        try:
            iv = os.urandom(IV_LENGTH)
            sealed = AESGCM(self._key).encrypt(iv, account_number.encode("utf-8"), None)
            return base64.b64encode(iv + sealed).decode("ascii")
        except (ValueError, TypeError) as e:
            logger.error(f"Account number encryption failed: {e}")
            return None

    def decrypt(self, encrypted: Optional[str]) -> str:
        """Operator-only helper. Returns "" for anything that does not decrypt."""
        if not self._key or not encrypted:
            return ""
        try:
            blob = base64.b64decode(encrypted)
            if len(blob) < IV_LENGTH + TAG_LENGTH:
                return ""
            plain = AESGCM(self._key).decrypt(blob[:IV_LENGTH], blob[IV_LENGTH:], None)
            return plain.decode("utf-8")
        except (InvalidTag, ValueError, TypeError):
            return ""


def encrypt_account_number(account_number: str) -> Optional[str]:
    return AccountNumberEncryptor().encrypt(account_number)


def decrypt_account_number(encrypted: Optional[str]) -> str:
    return AccountNumberEncryptor().decrypt(encrypted)
