from datetime import datetime, timezone
import enum
from sqlalchemy import Column, String, DateTime, Integer, BigInteger, ForeignKey, Index, JSON
from core.database import Base

class AttemptType(str, enum.Enum):
    BANK = "bank"
    UPI = "upi"


class VerificationAttempt(Base):
    """Append-only audit row, one per attempt that reached the provider."""
    __tablename__ = "merchant_verification_attempts"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    store_id = Column(BigInteger, ForeignKey("merchant_stores.id"), nullable=False)
    merchant_parent_id = Column(BigInteger, nullable=True)
    attempt_type = Column(String(10), nullable=False)
    bank_account_id = Column(BigInteger, ForeignKey("merchant_store_bank_accounts.id"), nullable=True)
    upi_account_id = Column(BigInteger, ForeignKey("merchant_store_upi_accounts.id"), nullable=True)
    razorpay_validation_id = Column(String(64), nullable=True)
    status = Column(String(20), nullable=False)
    verification_response = Column(JSON, nullable=True)
    # "metadata" is reserved on declarative classes
    attempt_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    __table_args__ = (
        Index("idx_attempt_store_time", "store_id", "created_at"),
    )
