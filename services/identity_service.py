import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.orm import Session
from core.exceptions import AuthorizationError
from models.merchant_store import MerchantStore, MerchantParent
from repositories.merchant_store_repository import MerchantStoreRepository
from utils.account_utils import as_utc

logger = logging.getLogger(__name__)


@dataclass
class MerchantIdentity:
    merchant_parent_id: int
    session_token: str


class IdentityResolver:
    """Maps a session token to the merchant parent that owns it."""

    @staticmethod
    def resolve(db: Session, session_token: Optional[str]) -> MerchantIdentity:
        if not session_token:
            raise AuthorizationError.not_authenticated()

        session = MerchantStoreRepository.get_session_by_token(db, session_token)
        if not session:
            raise AuthorizationError.not_authenticated()

        expires_at = as_utc(session.expires_at)
        if expires_at and expires_at <= datetime.now(timezone.utc):
            logger.info(f"Expired merchant session for parent {session.merchant_parent_id}")
            raise AuthorizationError.not_authenticated()

        return MerchantIdentity(merchant_parent_id=session.merchant_parent_id, session_token=session_token)

    @staticmethod
    def authorize_store(db: Session, identity: MerchantIdentity, store_id: str) -> MerchantStore:
        store = MerchantStoreRepository.get_store_for_parent(db, store_id, identity.merchant_parent_id)
        if not store:
            raise AuthorizationError.store_not_found()
        return store

    @staticmethod
    def get_parent(db: Session, store: MerchantStore) -> Optional[MerchantParent]:
        return MerchantStoreRepository.get_parent_by_id(db, store.parent_id)
