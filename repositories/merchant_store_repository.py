from datetime import datetime, timezone
from sqlalchemy.orm import Session
from models.merchant_store import MerchantStore, MerchantParent
from models.merchant_session import MerchantSession
from typing import Optional

class MerchantStoreRepository:

    @staticmethod
    def get_session_by_token(db: Session, token: str) -> Optional[MerchantSession]:
        return db.query(MerchantSession).filter(
            MerchantSession.token == token,
            MerchantSession.revoked.is_(False),
        ).first()

    @staticmethod
    def get_parent_by_id(db: Session, parent_id: int) -> Optional[MerchantParent]:
        return db.query(MerchantParent).filter(MerchantParent.id == parent_id).first()

    @staticmethod
    def get_store_for_parent(db: Session, store_id: str, parent_id: int) -> Optional[MerchantStore]:
        return db.query(MerchantStore).filter(
            MerchantStore.store_id == str(store_id),
            MerchantStore.parent_id == parent_id,
        ).first()

    @staticmethod
    def get_by_public_id(db: Session, store_id: str) -> Optional[MerchantStore]:
        return db.query(MerchantStore).filter(MerchantStore.store_id == str(store_id)).first()

    @staticmethod
    def create_session(db: Session, token: str, parent_id: int, expires_at: Optional[datetime] = None) -> MerchantSession:
        session = MerchantSession(
            token=token,
            merchant_parent_id=parent_id,
            expires_at=expires_at,
            created_at=datetime.now(timezone.utc),
        )
        db.add(session)
        db.commit()
        db.refresh(session)
        return session
