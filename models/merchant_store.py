from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, BigInteger, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from core.database import Base

class MerchantParent(Base):
    __tablename__ = "merchant_parents"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    parent_name = Column(String(150), nullable=True)
    owner_name = Column(String(150), nullable=True)
    owner_email = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    stores = relationship("MerchantStore", back_populates="parent", lazy="select")


class MerchantStore(Base):
    __tablename__ = "merchant_stores"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    store_id = Column(String(40), unique=True, nullable=False, index=True)
    parent_id = Column(BigInteger, ForeignKey("merchant_parents.id"), nullable=False)
    store_name = Column(String(150), nullable=False)
    store_display_name = Column(String(150), nullable=True)
    owner_name = Column(String(150), nullable=True)
    store_email = Column(String(255), nullable=True)
    store_phone = Column(String(25), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    parent = relationship("MerchantParent", back_populates="stores")

    __table_args__ = (
        Index("idx_store_parent", "parent_id", "store_id"),
    )
