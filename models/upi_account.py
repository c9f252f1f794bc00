from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Boolean, Integer, BigInteger, ForeignKey, JSON, UniqueConstraint
from core.database import Base
from models.bank_account import VerificationStatus

class MerchantStoreUpiAccount(Base):
    __tablename__ = "merchant_store_upi_accounts"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    store_id = Column(BigInteger, ForeignKey("merchant_stores.id"), nullable=False, index=True)
    upi_id = Column(String(100), nullable=False)
    holder_name = Column(String(150), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    verification_status = Column(String(20), default=VerificationStatus.PENDING.value, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    beneficiary_name = Column(String(150), nullable=True)
    verification_response = Column(JSON, nullable=True)
    attempt_count = Column(Integer, default=0, nullable=False)
    last_attempt_at = Column(DateTime(timezone=True), nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    razorpay_validation_id = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc), nullable=False)

    __table_args__ = (
        UniqueConstraint("store_id", "upi_id", name="uq_store_upi_id"),
    )
