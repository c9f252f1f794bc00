from sqlalchemy import func
from sqlalchemy.orm import Session
from models.upi_account import MerchantStoreUpiAccount
from typing import Optional

class UpiAccountRepository:

    @staticmethod
    def get_by_upi_id(db: Session, store_pk: int, upi_id: str) -> Optional[MerchantStoreUpiAccount]:
        return db.query(MerchantStoreUpiAccount).filter(
            MerchantStoreUpiAccount.store_id == store_pk,
            func.lower(MerchantStoreUpiAccount.upi_id) == upi_id.lower(),
        ).first()

    @staticmethod
    def get_latest(db: Session, store_pk: int) -> Optional[MerchantStoreUpiAccount]:
        return db.query(MerchantStoreUpiAccount).filter(
            MerchantStoreUpiAccount.store_id == store_pk,
            MerchantStoreUpiAccount.is_active.is_(True),
        ).order_by(MerchantStoreUpiAccount.updated_at.desc()).first()

    @staticmethod
    def count_for_store(db: Session, store_pk: int) -> int:
        return db.query(MerchantStoreUpiAccount).filter(
            MerchantStoreUpiAccount.store_id == store_pk
        ).count()

    @staticmethod
    def add(db: Session, account: MerchantStoreUpiAccount) -> MerchantStoreUpiAccount:
        db.add(account)
        db.flush()
        return account

    @staticmethod
    def save(db: Session, account: MerchantStoreUpiAccount) -> MerchantStoreUpiAccount:
        db.commit()
        db.refresh(account)
        return account
