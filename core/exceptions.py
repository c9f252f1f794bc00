"""Error taxonomy for bank / UPI verification.

Every error carries a machine-checkable ``kind`` and a merchant-facing
``message``. They subclass ``HTTPException`` so routers can keep re-raising
them untouched.
"""
from typing import List, Optional
from fastapi import HTTPException


class VerificationError(HTTPException):
    kind = "verification_error"
    default_status = 400

    def __init__(self, message: str, status_code: Optional[int] = None, headers: Optional[dict] = None):
        super().__init__(status_code=status_code or self.default_status, detail=message, headers=headers)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "kind": self.kind, "message": self.message}


class AuthorizationError(VerificationError):
    kind = "authorization_error"
    default_status = 404

    @classmethod
    def not_authenticated(cls) -> "AuthorizationError":
        return cls("Not authenticated", status_code=401)

    @classmethod
    def store_not_found(cls) -> "AuthorizationError":
        return cls("Store not found or access denied", status_code=404)


class ValidationError(VerificationError):
    kind = "validation_error"
    default_status = 400

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []

    @classmethod
    def missing_fields(cls, fields: List[str]) -> "ValidationError":
        return cls(f"Missing required fields: {', '.join(fields)}", fields=fields)

    @classmethod
    def name_mismatch(cls) -> "ValidationError":
        err = cls("Account holder name must match your store name, display name, or owner name "
                  "(partial match allowed).")
        err.kind = "name_mismatch"
        return err

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.fields:
            body["fields"] = self.fields
        return body


class QuotaError(VerificationError):
    kind = "quota_error"
    default_status = 429

    def __init__(self, message: str, reason: str, retry_after_seconds: Optional[int] = None):
        headers = {"Retry-After": str(retry_after_seconds)} if retry_after_seconds else None
        super().__init__(message, headers=headers)
        self.reason = reason
        self.retry_after_seconds = retry_after_seconds

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["reason"] = self.reason
        if self.retry_after_seconds is not None:
            body["retry_after_seconds"] = self.retry_after_seconds
        return body


class ConfigurationError(VerificationError):
    kind = "configuration_error"
    default_status = 503

    def __init__(self, detail: str):
        super().__init__("Verification service unavailable. Contact support.")
        self.operator_detail = detail


class ProviderError(VerificationError):
    kind = "provider_error"
    default_status = 400

    @classmethod
    def rejected(cls) -> "ProviderError":
        return cls("Could not validate account. Check account details and try again.")

    @classmethod
    def unreachable(cls) -> "ProviderError":
        return cls("Verification service temporarily unavailable. Try again later.", status_code=502)


class PersistenceError(VerificationError):
    kind = "persistence_error"
    default_status = 500

    def __init__(self):
        super().__init__("Verification may have succeeded but could not be saved. Contact support.")
