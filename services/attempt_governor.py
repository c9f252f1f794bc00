import logging
import math
from datetime import datetime, date
from typing import Optional
from sqlalchemy.orm import Session
from core.config import (
    MAX_BANK_ATTEMPTS_PER_DAY, MAX_UPI_ATTEMPTS_PER_DAY,
    MAX_BANK_ACCOUNTS_PER_STORE, MAX_UPI_ACCOUNTS_PER_STORE,
    VERIFICATION_COOLDOWN_SECONDS,
)
from core.exceptions import QuotaError
from models.verification_attempt import AttemptType
from models.verification_limits import VerificationLimits
from repositories.verification_limits_repository import VerificationLimitsRepository
from repositories.bank_account_repository import BankAccountRepository
from repositories.upi_account_repository import UpiAccountRepository
from utils.account_utils import as_utc

logger = logging.getLogger(__name__)

DAILY_LIMIT = "daily_limit_exceeded"
COOLDOWN = "cooldown_active"
ACCOUNT_LIMIT = "account_limit_exceeded"


class AttemptGovernor:
    """Daily quota, per-account cooldown and account-count ceiling.

    Checks are read-only apart from the day rollover. The counter itself is only
    incremented once a request has reached the provider (see ``record_attempt``).
    """

    def __init__(self, max_bank_per_day: int = MAX_BANK_ATTEMPTS_PER_DAY,
                 max_upi_per_day: int = MAX_UPI_ATTEMPTS_PER_DAY,
                 max_bank_accounts: int = MAX_BANK_ACCOUNTS_PER_STORE,
                 max_upi_accounts: int = MAX_UPI_ACCOUNTS_PER_STORE,
                 cooldown_seconds: int = VERIFICATION_COOLDOWN_SECONDS):
        self.max_bank_per_day = max_bank_per_day
        self.max_upi_per_day = max_upi_per_day
        self.max_bank_accounts = max_bank_accounts
        self.max_upi_accounts = max_upi_accounts
        self.cooldown_seconds = cooldown_seconds

    def max_per_day(self, attempt_type: str) -> int:
        return self.max_upi_per_day if attempt_type == AttemptType.UPI.value else self.max_bank_per_day

    @staticmethod
    def attempts_today(limits: Optional[VerificationLimits], attempt_type: str, today: date) -> int:
        if not limits or limits.last_reset_date != today:
            return 0
        if attempt_type == AttemptType.UPI.value:
            return limits.upi_attempts_today or 0
        return limits.bank_attempts_today or 0

    def check_and_reserve(self, db: Session, store_pk: int, attempt_type: str, now: datetime,
                          last_attempt_at: Optional[datetime] = None) -> dict:
        today = now.date()
        limits = VerificationLimitsRepository.get_or_create(db, store_pk, today)
        if VerificationLimitsRepository.roll_over(db, limits, today):
            logger.info(f"Verification counters rolled over for store {store_pk}")

        used = self.attempts_today(limits, attempt_type, today)
        if used >= self.max_per_day(attempt_type):
            return {"allowed": False, "retry_after_seconds": None, "reason": DAILY_LIMIT}

        last_attempt_at = as_utc(last_attempt_at)
        if last_attempt_at:
            elapsed = (now - last_attempt_at).total_seconds()
            if elapsed < self.cooldown_seconds:
                retry_after = max(1, math.ceil(self.cooldown_seconds - elapsed))
                return {"allowed": False, "retry_after_seconds": retry_after, "reason": COOLDOWN}

        return {"allowed": True, "retry_after_seconds": None, "reason": None}

    def enforce(self, db: Session, store_pk: int, attempt_type: str, now: datetime,
                last_attempt_at: Optional[datetime] = None) -> None:
        decision = self.check_and_reserve(db, store_pk, attempt_type, now, last_attempt_at)
        if decision["allowed"]:
            return

        label = "UPI" if attempt_type == AttemptType.UPI.value else "bank"
        if decision["reason"] == DAILY_LIMIT:
            limit = self.max_per_day(attempt_type)
            logger.info(f"Daily {label} verification limit reached for store {store_pk}")
            raise QuotaError(
                f"Maximum {limit} {label} verifications per day. Try again tomorrow.",
                reason=DAILY_LIMIT,
            )
        retry_after = decision["retry_after_seconds"]
        raise QuotaError(
            f"Please wait {retry_after} seconds between attempts.",
            reason=COOLDOWN,
            retry_after_seconds=retry_after,
        )

    def enforce_account_ceiling(self, db: Session, store_pk: int, attempt_type: str) -> None:
        """Only called when the request would create a new account row."""
        if attempt_type == AttemptType.UPI.value:
            count, ceiling, label = UpiAccountRepository.count_for_store(db, store_pk), self.max_upi_accounts, "UPI IDs"
        else:
            count, ceiling, label = BankAccountRepository.count_active(db, store_pk), self.max_bank_accounts, "bank accounts"
        if count >= ceiling:
            raise QuotaError(f"Maximum {ceiling} {label} per store.", reason=ACCOUNT_LIMIT)

    @staticmethod
    def record_attempt(db: Session, store_pk: int, attempt_type: str, now: datetime) -> VerificationLimits:
        return VerificationLimitsRepository.increment(db, store_pk, attempt_type, now.date())
