import logging
import time
from datetime import datetime, timezone
from typing import Optional, Union
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from core.config import (
    RAZORPAY_X_ACCOUNT_NUMBER, CONFIRM_DELAY_SECONDS, CONFIRM_ATTEMPTS, VERIFICATION_MODE,
)
from core.exceptions import (
    AuthorizationError, ValidationError, ConfigurationError, ProviderError, PersistenceError,
)
from models.bank_account import MerchantStoreBankAccount, VerificationStatus
from models.merchant_store import MerchantStore
from models.upi_account import MerchantStoreUpiAccount
from models.verification_attempt import AttemptType
from providers.validation_provider import (
    get_validation_provider, parse_validation_result, fund_account_references,
)
from repositories.bank_account_repository import BankAccountRepository
from repositories.upi_account_repository import UpiAccountRepository
from repositories.verification_attempt_repository import VerificationAttemptRepository
from repositories.verification_limits_repository import VerificationLimitsRepository
from schemas.bank_schema import (
    BankVerificationRequest, UpiVerificationRequest, ConfirmVerificationRequest,
    BANK_REQUIRED_FIELDS, UPI_REQUIRED_FIELDS,
)
from services.attempt_governor import AttemptGovernor
from services.identity_service import IdentityResolver, MerchantIdentity
from utils.account_utils import (
    mask_account_number, is_valid_upi_id, contact_email, contact_phone, build_reference_id,
)
from utils.encryption import AccountNumberEncryptor
from utils.name_matcher import is_beneficiary_name_allowed

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    VerificationStatus.VERIFIED.value: "Account verified successfully.",
    VerificationStatus.FAILED.value: "Verification failed. Check account details and try again.",
    VerificationStatus.PROCESSING.value: "Validation in progress. Refresh in a moment.",
}


def status_from_result(parsed: dict) -> str:
    if parsed["failed"]:
        return VerificationStatus.FAILED.value
    if parsed["verified"]:
        return VerificationStatus.VERIFIED.value
    return VerificationStatus.PROCESSING.value


class BankVerificationService:
    """Sequences one bank / UPI verification request end to end.

    This is the only writer of the verification fields on bank and UPI
    accounts and of the per-store attempt counters. Steps run strictly in
    order: authorize, validate fields, match name, check quota, check
    configuration, submit, confirm, persist, audit, count.
    """

    def __init__(self, db: Session, provider=None, governor: Optional[AttemptGovernor] = None,
                 encryptor: Optional[AccountNumberEncryptor] = None,
                 source_account_number: Optional[str] = None,
                 confirm_delay_seconds: float = CONFIRM_DELAY_SECONDS,
                 confirm_attempts: int = CONFIRM_ATTEMPTS,
                 sleep=time.sleep):
        self.db = db
        self.provider = provider if provider is not None else get_validation_provider(db)
        self.governor = governor or AttemptGovernor()
        self.encryptor = encryptor or AccountNumberEncryptor()
        self.source_account_number = (
            RAZORPAY_X_ACCOUNT_NUMBER if source_account_number is None else source_account_number
        ).strip()
        self.confirm_delay_seconds = confirm_delay_seconds
        self.confirm_attempts = max(1, confirm_attempts)
        self.sleep = sleep

    def verify(self, identity: MerchantIdentity,
               request: Union[BankVerificationRequest, UpiVerificationRequest],
               now: Optional[datetime] = None) -> dict:
        now = now or datetime.now(timezone.utc)
        attempt_type = request.account_type
        db = self.db

        store = IdentityResolver.authorize_store(db, identity, request.store_id)
        parent = IdentityResolver.get_parent(db, store)

        self._require_fields(request)
        if attempt_type == AttemptType.UPI.value and not is_valid_upi_id(request.upi_id):
            raise ValidationError("Invalid UPI ID format (e.g. name@paytm)", fields=["upi_id"])

        holder_name = request.account_holder_name if attempt_type == AttemptType.BANK.value else request.holder_name
        if holder_name and not is_beneficiary_name_allowed(holder_name, [
            store.store_name,
            store.store_display_name,
            store.owner_name,
            parent.parent_name if parent else None,
        ]):
            logger.info(f"Holder name mismatch for store {store.store_id}")
            raise ValidationError.name_mismatch()

        target = self._find_target(store, request)
        if target is None:
            self.governor.enforce_account_ceiling(db, store.id, attempt_type)
        self.governor.enforce(db, store.id, attempt_type, now, target.last_attempt_at if target else None)

        if not self.source_account_number:
            logger.error("RAZORPAY_X_ACCOUNT_NUMBER is not set; cannot submit validations")
            raise ConfigurationError("settlement source account missing")
        if not self.provider.is_configured():
            logger.error(f"Validation provider '{self.provider.name}' has no credentials configured")
            raise ConfigurationError("provider credentials missing")

        reference_id = build_reference_id(attempt_type, store.id, now)
        submitted = self.provider.submit(
            account_type=attempt_type,
            source_account_number=self.source_account_number,
            holder_name=holder_name or request.upi_id,
            contact_email=contact_email(store.store_email, parent.owner_email if parent else None),
            contact_phone=contact_phone(store.store_phone),
            reference_id=reference_id,
            account_number=getattr(request, "account_number", None),
            ifsc=getattr(request, "ifsc_code", None),
            vpa=getattr(request, "upi_id", None),
        )
        if not submitted["success"]:
            logger.warning(f"Validation submit failed for store {store.store_id} ({reference_id}): {submitted['error']}")
            if submitted.get("unreachable"):
                raise ProviderError.unreachable()
            raise ProviderError.rejected()

        validation_id = submitted["validation_id"]
        final_data = self._confirm(validation_id, fallback=submitted["data"])
        parsed = parse_validation_result(final_data)
        status = status_from_result(parsed)
        logger.info(
            f"{attempt_type} validation {validation_id} for store {store.store_id}: "
            f"provider={parsed['provider_status']} account={parsed['account_status']} -> {status}"
        )

        account = None
        try:
            if attempt_type == AttemptType.UPI.value:
                account = self._save_upi_account(store, target, request, status, parsed, final_data,
                                                 validation_id, reference_id, now)
            else:
                account = self._save_bank_account(store, target, request, status, parsed, final_data,
                                                  submitted["data"], validation_id, reference_id, now)
        finally:
            # the provider has been contacted: audit and count even when the account row was not saved
            self._write_audit(store, identity, attempt_type, status, validation_id, final_data,
                              reference_id, account.id if account is not None else None)
            self._count_attempt(store, attempt_type, now, validation_id)

        return {
            "status": status,
            "beneficiary_name": parsed["beneficiary_name"],
            "message": STATUS_MESSAGES[status],
        }

    def confirm_pending(self, identity: MerchantIdentity, request: ConfirmVerificationRequest,
                        now: Optional[datetime] = None) -> dict:
        """Re-fetch a processing validation. Terminal records are returned unchanged."""
        now = now or datetime.now(timezone.utc)
        store = IdentityResolver.authorize_store(self.db, identity, request.store_id)

        if request.account_type == AttemptType.UPI.value:
            account = UpiAccountRepository.get_latest(self.db, store.id)
        elif request.bank_account_id:
            account = BankAccountRepository.get_for_store(self.db, request.bank_account_id, store.id)
        else:
            account = BankAccountRepository.get_primary(self.db, store.id)
        if not account:
            raise ValidationError("No verification found for this store")

        if account.verification_status != VerificationStatus.PROCESSING.value or not account.razorpay_validation_id:
            return self._stored_result(account)

        confirmed = self.provider.confirm(account.razorpay_validation_id)
        if not confirmed["success"]:
            logger.info(f"Confirm for {account.razorpay_validation_id} still unavailable: {confirmed['error']}")
            return self._stored_result(account)

        parsed = parse_validation_result(confirmed["data"])
        status = status_from_result(parsed)
        if status == VerificationStatus.PROCESSING.value:
            return self._stored_result(account)

        account.verification_status = status
        account.is_verified = status == VerificationStatus.VERIFIED.value
        account.beneficiary_name = parsed["beneficiary_name"] or account.beneficiary_name
        account.verification_response = confirmed["data"]
        account.verified_at = now if account.is_verified else None
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                f"Could not save confirmed result {status} for validation "
                f"{account.razorpay_validation_id} (store {store.store_id}): {e}"
            )
            raise PersistenceError() from e
        logger.info(f"Validation {account.razorpay_validation_id} resolved to {status} on confirm")
        return self._stored_result(account)

    def get_status(self, identity: MerchantIdentity, store_id: str, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now(timezone.utc)
        store = IdentityResolver.authorize_store(self.db, identity, store_id)
        limits = VerificationLimitsRepository.get_by_store(self.db, store.id)
        today = now.date()
        bank_today = self.governor.attempts_today(limits, AttemptType.BANK.value, today)
        upi_today = self.governor.attempts_today(limits, AttemptType.UPI.value, today)

        primary = BankAccountRepository.get_primary(self.db, store.id)
        upi = UpiAccountRepository.get_latest(self.db, store.id)
        verification_status = primary.verification_status if primary else VerificationStatus.PENDING.value
        verified = bool(primary and (primary.is_verified or verification_status == VerificationStatus.VERIFIED.value))

        return {
            "verified": verified,
            "verification_status": verification_status,
            "can_edit": not verified,
            "can_try_verify": bank_today < self.governor.max_bank_per_day,
            "bank_attempts_today": bank_today,
            "upi_attempts_today": upi_today,
            "max_bank_attempts_per_day": self.governor.max_bank_per_day,
            "max_upi_attempts_per_day": self.governor.max_upi_per_day,
            "upi_verification_status": upi.verification_status if upi else None,
        }

    @staticmethod
    def _require_fields(request) -> None:
        required = UPI_REQUIRED_FIELDS if request.account_type == AttemptType.UPI.value else BANK_REQUIRED_FIELDS
        missing = [field for field in required if not getattr(request, field, None)]
        if missing:
            raise ValidationError.missing_fields(missing)

    def _find_target(self, store: MerchantStore, request):
        if request.account_type == AttemptType.UPI.value:
            return UpiAccountRepository.get_by_upi_id(self.db, store.id, request.upi_id)
        if request.bank_account_id:
            account = BankAccountRepository.get_for_store(self.db, request.bank_account_id, store.id)
            if not account:
                raise AuthorizationError("Bank account not found or access denied")
            return account
        # re-verification reuses the primary slot
        return BankAccountRepository.get_primary(self.db, store.id)

    def _confirm(self, validation_id: str, fallback: dict) -> dict:
        for attempt in range(1, self.confirm_attempts + 1):
            self.sleep(self.confirm_delay_seconds)
            confirmed = self.provider.confirm(validation_id)
            if confirmed["success"]:
                return confirmed["data"]
            logger.warning(
                f"Confirm {attempt}/{self.confirm_attempts} for {validation_id} failed: {confirmed['error']}"
            )
        return fallback

    def _save_bank_account(self, store: MerchantStore, target: Optional[MerchantStoreBankAccount],
                           request: BankVerificationRequest, status: str, parsed: dict,
                           final_data: dict, submit_data: dict, validation_id: str, reference_id: str,
                           now: datetime) -> MerchantStoreBankAccount:
        fund_account_id, contact_id = fund_account_references(submit_data, final_data)
        encrypted = self.encryptor.encrypt(request.account_number)
        masked = mask_account_number(request.account_number)
        verified = status == VerificationStatus.VERIFIED.value
        fields = {
            "account_holder_name": request.account_holder_name,
            # with encryption on, only the masked number is kept in clear
            "account_number": masked if encrypted else request.account_number,
            "account_number_masked": masked,
            "account_number_encrypted": encrypted,
            "ifsc_code": request.ifsc_code,
            "bank_name": request.bank_name,
            "branch_name": request.branch_name,
            "verification_status": status,
            "is_verified": verified,
            "beneficiary_name": parsed["beneficiary_name"],
            "verification_response": final_data,
            "last_attempt_at": now,
            "verified_at": now if verified else None,
            "razorpay_validation_id": validation_id,
            "razorpay_fund_account_id": fund_account_id,
            "razorpay_contact_id": contact_id,
            "updated_at": now,
        }

        try:
            account = target
            if account is None:
                account = MerchantStoreBankAccount(store_id=store.id, is_primary=True, is_active=True,
                                                   attempt_count=0, created_at=now, **fields)
                try:
                    BankAccountRepository.add(self.db, account)
                except IntegrityError:
                    # a concurrent request claimed the primary slot first
                    self.db.rollback()
                    account = BankAccountRepository.get_primary(self.db, store.id)
                    if account is None:
                        raise
            for key, value in fields.items():
                setattr(account, key, value)
            account.attempt_count = (account.attempt_count or 0) + 1
            return BankAccountRepository.save(self.db, account)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                f"Failed to save bank verification for store {store.store_id}: validation_id={validation_id} "
                f"reference_id={reference_id} status={status} account={mask_account_number(request.account_number)}: {e}"
            )
            raise PersistenceError() from e

    def _save_upi_account(self, store: MerchantStore, target: Optional[MerchantStoreUpiAccount],
                          request: UpiVerificationRequest, status: str, parsed: dict,
                          final_data: dict, validation_id: str, reference_id: str,
                          now: datetime) -> MerchantStoreUpiAccount:
        verified = status == VerificationStatus.VERIFIED.value
        fields = {
            "holder_name": request.holder_name,
            "verification_status": status,
            "is_verified": verified,
            "beneficiary_name": parsed["beneficiary_name"],
            "verification_response": final_data,
            "last_attempt_at": now,
            "verified_at": now if verified else None,
            "razorpay_validation_id": validation_id,
            "updated_at": now,
        }
        try:
            account = target
            if account is None:
                account = MerchantStoreUpiAccount(store_id=store.id, upi_id=request.upi_id, is_active=True,
                                                  attempt_count=0, created_at=now, **fields)
                try:
                    UpiAccountRepository.add(self.db, account)
                except IntegrityError:
                    self.db.rollback()
                    account = UpiAccountRepository.get_by_upi_id(self.db, store.id, request.upi_id)
                    if account is None:
                        raise
            for key, value in fields.items():
                setattr(account, key, value)
            account.attempt_count = (account.attempt_count or 0) + 1
            return UpiAccountRepository.save(self.db, account)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                f"Failed to save UPI verification for store {store.store_id}: validation_id={validation_id} "
                f"reference_id={reference_id} status={status}: {e}"
            )
            raise PersistenceError() from e

    def _write_audit(self, store: MerchantStore, identity: MerchantIdentity, attempt_type: str,
                     status: str, validation_id: str, final_data: dict, reference_id: str,
                     account_id: Optional[int]) -> None:
        # best effort: the response must not fail because of the audit log
        is_upi = attempt_type == AttemptType.UPI.value
        try:
            VerificationAttemptRepository.create_attempt_log(
                db=self.db,
                store_pk=store.id,
                merchant_parent_id=identity.merchant_parent_id,
                attempt_type=attempt_type,
                status=status,
                validation_id=validation_id,
                verification_response=final_data,
                metadata={"reference_id": reference_id, "mode": VERIFICATION_MODE,
                          "account_saved": account_id is not None},
                bank_account_id=None if is_upi else account_id,
                upi_account_id=account_id if is_upi else None,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Audit write failed for validation {validation_id} ({reference_id}): {e}")

    def _count_attempt(self, store: MerchantStore, attempt_type: str, now: datetime, validation_id: str) -> None:
        try:
            limits = self.governor.record_attempt(self.db, store.id, attempt_type, now)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Attempt counter update failed for store {store.store_id} ({validation_id}): {e}")
            return
        logger.info(
            f"Store {store.store_id} attempts today: bank={limits.bank_attempts_today} upi={limits.upi_attempts_today}"
        )

    @staticmethod
    def _stored_result(account) -> dict:
        status = account.verification_status
        if status not in STATUS_MESSAGES:
            status = VerificationStatus.PROCESSING.value
        return {
            "status": status,
            "beneficiary_name": account.beneficiary_name,
            "message": STATUS_MESSAGES[status],
        }
