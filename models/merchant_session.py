from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Boolean, BigInteger, Integer, ForeignKey
from core.database import Base

class MerchantSession(Base):
    __tablename__ = "merchant_sessions"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    token = Column(String(128), unique=True, nullable=False, index=True)
    merchant_parent_id = Column(BigInteger, ForeignKey("merchant_parents.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    revoked = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
