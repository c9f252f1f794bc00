from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Date, Integer, BigInteger, ForeignKey, Index
from core.database import Base

class VerificationLimits(Base):
    __tablename__ = "merchant_verification_limits"

    store_id = Column(BigInteger, ForeignKey("merchant_stores.id"), primary_key=True, autoincrement=False)
    bank_attempts_today = Column(Integer, nullable=False, default=0)
    upi_attempts_today = Column(Integer, nullable=False, default=0)
    last_reset_date = Column(Date, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc), nullable=False)

    __table_args__ = (
        Index("idx_limits_last_reset", "last_reset_date"),
    )
