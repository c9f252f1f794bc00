from sqlalchemy.orm import Session
from models.verification_attempt import VerificationAttempt
from typing import List, Optional
from datetime import datetime, timezone

class VerificationAttemptRepository:

    @staticmethod
    def create_attempt_log(
        db: Session,
        store_pk: int,
        merchant_parent_id: Optional[int],
        attempt_type: str,
        status: str,
        validation_id: Optional[str],
        verification_response: Optional[dict],
        metadata: Optional[dict],
        bank_account_id: Optional[int] = None,
        upi_account_id: Optional[int] = None,
    ) -> VerificationAttempt:
        log = VerificationAttempt(
            store_id               = store_pk,
            merchant_parent_id     = merchant_parent_id,
            attempt_type           = attempt_type,
            bank_account_id        = bank_account_id,
            upi_account_id         = upi_account_id,
            razorpay_validation_id = validation_id,
            status                 = status,
            verification_response  = verification_response,
            attempt_metadata       = metadata,
            created_at             = datetime.now(timezone.utc),
        )
        db.add(log)
        db.commit()
        return log

    @staticmethod
    def get_by_store_in_range(
        db: Session,
        store_pk: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 100,
    ) -> List[VerificationAttempt]:
        query = db.query(VerificationAttempt).filter(VerificationAttempt.store_id == store_pk)
        if start is not None:
            query = query.filter(VerificationAttempt.created_at >= start)
        if end is not None:
            query = query.filter(VerificationAttempt.created_at <= end)
        return query.order_by(VerificationAttempt.created_at.desc()).limit(limit).all()

    @staticmethod
    def count_for_store(db: Session, store_pk: int) -> int:
        return db.query(VerificationAttempt).filter(VerificationAttempt.store_id == store_pk).count()
