from datetime import datetime, timezone
import enum
from sqlalchemy import Column, String, DateTime, Boolean, Integer, BigInteger, ForeignKey, Index, JSON, text
from core.database import Base

class VerificationStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    VERIFIED = "verified"
    FAILED = "failed"


class MerchantStoreBankAccount(Base):
    __tablename__ = "merchant_store_bank_accounts"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    store_id = Column(BigInteger, ForeignKey("merchant_stores.id"), nullable=False, index=True)
    account_holder_name = Column(String(150), nullable=False)
    account_number = Column(String(20), nullable=False)
    account_number_masked = Column(String(20), nullable=True)
    account_number_encrypted = Column(String(255), nullable=True)
    ifsc_code = Column(String(11), nullable=False)
    bank_name = Column(String(100), nullable=False)
    branch_name = Column(String(100), nullable=True)
    is_primary = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    verification_status = Column(String(20), default=VerificationStatus.PENDING.value, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    beneficiary_name = Column(String(150), nullable=True)
    verification_response = Column(JSON, nullable=True)
    attempt_count = Column(Integer, default=0, nullable=False)
    last_attempt_at = Column(DateTime(timezone=True), nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)

    razorpay_validation_id = Column(String(64), nullable=True)
    razorpay_contact_id = Column(String(64), nullable=True)
    razorpay_fund_account_id = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc), nullable=False)

    __table_args__ = (
        # one primary active account per store, enforced by the database
        Index(
            "uq_store_primary_active_bank", "store_id", unique=True,
            sqlite_where=text("is_primary = 1 AND is_active = 1"),
            postgresql_where=text("is_primary AND is_active"),
        ),
        Index("idx_bank_verification_status", "verification_status"),
    )
