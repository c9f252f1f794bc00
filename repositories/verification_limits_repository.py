from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from models.verification_limits import VerificationLimits
from datetime import date, datetime, timezone
from typing import Optional

class VerificationLimitsRepository:

    @staticmethod
    def get_by_store(db: Session, store_pk: int) -> Optional[VerificationLimits]:
        return db.query(VerificationLimits).filter(VerificationLimits.store_id == store_pk).first()

    @staticmethod
    def get_or_create(db: Session, store_pk: int, today: date) -> VerificationLimits:
        limits = VerificationLimitsRepository.get_by_store(db, store_pk)
        if not limits:
            limits = VerificationLimits(
                store_id=store_pk,
                bank_attempts_today=0,
                upi_attempts_today=0,
                last_reset_date=today,
            )
            db.add(limits)
            try:
                db.commit()
            except IntegrityError:
                # another request created the row first
                db.rollback()
                return VerificationLimitsRepository.get_by_store(db, store_pk)
            db.refresh(limits)
        return limits

    @staticmethod
    def roll_over(db: Session, limits: VerificationLimits, today: date) -> bool:
        if limits.last_reset_date == today:
            return False
        limits.bank_attempts_today = 0
        limits.upi_attempts_today = 0
        limits.last_reset_date = today
        db.commit()
        return True

    @staticmethod
    def increment(db: Session, store_pk: int, attempt_type: str, today: date) -> VerificationLimits:
        limits = VerificationLimitsRepository.get_or_create(db, store_pk, today)
        if limits.last_reset_date != today:
            limits.bank_attempts_today = 0
            limits.upi_attempts_today = 0
            limits.last_reset_date = today
        if attempt_type == "upi":
            limits.upi_attempts_today += 1
        else:
            limits.bank_attempts_today += 1
        limits.updated_at = datetime.now(timezone.utc)
        db.commit()
        return limits

    @staticmethod
    def reset_stale(db: Session, today: date) -> int:
        count = db.query(VerificationLimits).filter(
            VerificationLimits.last_reset_date < today
        ).update(
            {
                VerificationLimits.bank_attempts_today: 0,
                VerificationLimits.upi_attempts_today: 0,
                VerificationLimits.last_reset_date: today,
            },
            synchronize_session=False,
        )
        db.commit()
        return count
