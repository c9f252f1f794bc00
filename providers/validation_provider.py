import logging
import uuid
import requests
from typing import Optional
from sqlalchemy.orm import Session
from core.config import (
    VERIFICATION_MODE, RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET, RAZORPAY_BASE_URL,
    PROVIDER_TIMEOUT_SECONDS, VALIDATION_AMOUNT_PAISE, DEFAULT_CONTACT_PHONE,
)
from repositories.dummy_bank_account_repository import DummyBankAccountRepository
from utils.account_utils import digits_only
from utils.name_matcher import is_beneficiary_name_allowed

logger = logging.getLogger(__name__)

VERIFIED_ACCOUNT_STATUSES = ("active", "valid", "verified")


def parse_validation_result(data: Optional[dict]) -> dict:
    """Reduce a provider payload to verified / failed / beneficiary name.

    Anything missing maps to "not verified"; only an explicit completed status
    with an active account counts as verified.
    """
    data = data if isinstance(data, dict) else {}
    provider_status = data.get("status")
    results = data.get("validation_results") or data.get("results") or {}
    if not isinstance(results, dict):
        results = {}
    account_status = results.get("account_status")
    account_status = account_status.lower() if isinstance(account_status, str) else None

    registered_name = results.get("registered_name")
    if not registered_name:
        fund_account = data.get("fund_account")
        bank_account = fund_account.get("bank_account") if isinstance(fund_account, dict) else None
        registered_name = bank_account.get("name") if isinstance(bank_account, dict) else None
    beneficiary_name = (registered_name.strip() or None) if isinstance(registered_name, str) else None

    verified = provider_status == "completed" and account_status in VERIFIED_ACCOUNT_STATUSES
    failed = provider_status == "failed" or account_status == "invalid"
    return {
        "verified": verified,
        "failed": failed,
        "beneficiary_name": beneficiary_name,
        "provider_status": provider_status,
        "account_status": account_status,
    }


def fund_account_references(*payloads: Optional[dict]) -> tuple:
    """(fund_account_id, contact_id) from the first payload that carries a fund account."""
    for data in payloads:
        fund_account = data.get("fund_account") if isinstance(data, dict) else None
        if not isinstance(fund_account, dict) or not fund_account.get("id"):
            continue
        contact = fund_account.get("contact")
        contact_id = fund_account.get("contact_id") or (contact.get("id") if isinstance(contact, dict) else None)
        return fund_account["id"], contact_id
    return None, None


class RazorpayValidationProvider:
    """Razorpay fund-account validation: submit, then fetch the result by id."""

    name = "razorpay"

    def __init__(self, key_id: str = RAZORPAY_KEY_ID, key_secret: str = RAZORPAY_KEY_SECRET,
                 base_url: str = RAZORPAY_BASE_URL, timeout: int = PROVIDER_TIMEOUT_SECONDS,
                 amount_paise: int = VALIDATION_AMOUNT_PAISE):
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.amount_paise = amount_paise

    def is_configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    def submit(self, account_type: str, source_account_number: str, holder_name: str,
               contact_email: str, contact_phone: str, reference_id: str,
               account_number: Optional[str] = None, ifsc: Optional[str] = None,
               vpa: Optional[str] = None) -> dict:
        contact = {
            "name": (holder_name or vpa or "")[:100],
            "email": contact_email[:255],
            "contact": digits_only(contact_phone)[:15] or DEFAULT_CONTACT_PHONE,
            "type": "vendor",
            "reference_id": reference_id,
        }
        payload = {
            "source_account_number": source_account_number,
            "reference_id": reference_id[:40],
            "notes": {"store_ref": reference_id},
        }
        if account_type == "upi":
            payload["fund_account"] = {
                "account_type": "vpa",
                "vpa": {"address": (vpa or "").strip().lower()},
                "contact": contact,
            }
        else:
            payload["fund_account"] = {
                "account_type": "bank_account",
                "bank_account": {
                    "name": holder_name[:100],
                    "ifsc": (ifsc or "").strip().upper()[:11],
                    "account_number": digits_only(account_number),
                },
                "contact": contact,
            }
            if self.amount_paise > 0:
                payload["amount"] = self.amount_paise
                payload["currency"] = "INR"
            else:
                payload["validation_type"] = "pennyless"

        try:
            response = requests.post(
                f"{self.base_url}/fund_accounts/validations",
                auth=(self.key_id, self.key_secret),
                headers={"Content-Type": "application/json"},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Razorpay validation submit failed ({reference_id}): {e}")
            return {"success": False, "error": "Validation service unreachable", "unreachable": True}

        data = self._json(response)
        if not response.ok:
            error = data.get("error")
            message = (error.get("description") if isinstance(error, dict) else error) or response.reason
            logger.warning(f"Razorpay rejected validation {reference_id}: {response.status_code} {message}")
            return {"success": False, "error": message or "Validation request failed", "unreachable": False}

        validation_id = data.get("id")
        if not validation_id:
            return {"success": False, "error": "Validation id missing in provider response", "unreachable": False}
        return {"success": True, "validation_id": validation_id, "data": data}

    def confirm(self, validation_id: str) -> dict:
        try:
            response = requests.get(
                f"{self.base_url}/fund_accounts/validations/{validation_id}",
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Razorpay validation fetch failed for {validation_id}: {e}")
            return {"success": False, "error": "Validation service unreachable"}

        data = self._json(response)
        if not response.ok:
            error = data.get("error")
            message = error.get("description") if isinstance(error, dict) else None
            return {"success": False, "error": message or "Failed to fetch validation"}
        return {"success": True, "data": data}

    @staticmethod
    def _json(response) -> dict:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}


class DummyValidationProvider:
    """Resolves validations against the local dummy_bank_accounts table."""

    name = "dummy"

    def __init__(self, db: Session):
        self.db = db
        self._results = {}

    def is_configured(self) -> bool:
        return True

    def submit(self, account_type: str, source_account_number: str, holder_name: str,
               contact_email: str, contact_phone: str, reference_id: str,
               account_number: Optional[str] = None, ifsc: Optional[str] = None,
               vpa: Optional[str] = None) -> dict:
        suffix = uuid.uuid4().hex[:14]
        validation_id = f"fav_dummy_{suffix}"

        if account_type == "upi":
            record = DummyBankAccountRepository.get_by_upi_id(self.db, vpa or "")
            matches = record is not None
        else:
            record = DummyBankAccountRepository.get_by_account_number(self.db, digits_only(account_number))
            matches = record is not None and record.ifsc.upper() == (ifsc or "").strip().upper()

        if not matches:
            result = {"status": "completed", "account_status": "invalid", "registered_name": None}
        elif not record.is_active:
            result = {"status": "failed", "account_status": "invalid", "registered_name": record.account_holder_name}
        elif holder_name and not is_beneficiary_name_allowed(holder_name, [record.account_holder_name]):
            result = {"status": "completed", "account_status": "invalid", "registered_name": record.account_holder_name}
        else:
            result = {"status": "completed", "account_status": "active", "registered_name": record.account_holder_name}

        self._results[validation_id] = {
            "id": validation_id,
            "status": result["status"],
            "reference_id": reference_id[:40],
            "validation_results": {
                "account_status": result["account_status"],
                "registered_name": result["registered_name"],
            },
        }
        return {
            "success": True,
            "validation_id": validation_id,
            "data": {
                "id": validation_id,
                "status": "created",
                "reference_id": reference_id[:40],
                "fund_account": {"id": f"fa_dummy_{suffix}", "contact_id": f"cont_dummy_{suffix}"},
            },
        }

    def confirm(self, validation_id: str) -> dict:
        data = self._results.get(validation_id)
        if data is None:
            return {"success": False, "error": "Validation not found"}
        return {"success": True, "data": data}


def get_validation_provider(db: Session):
    if VERIFICATION_MODE == "api":
        logger.info("Validation provider: Razorpay (real API)")
        return RazorpayValidationProvider()
    logger.info("Validation provider: Dummy (local DB)")
    return DummyValidationProvider(db)
