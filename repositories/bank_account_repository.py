from sqlalchemy.orm import Session
from models.bank_account import MerchantStoreBankAccount
from typing import Optional

class BankAccountRepository:

    @staticmethod
    def get_for_store(db: Session, account_id: int, store_pk: int) -> Optional[MerchantStoreBankAccount]:
        return db.query(MerchantStoreBankAccount).filter(
            MerchantStoreBankAccount.id == account_id,
            MerchantStoreBankAccount.store_id == store_pk,
        ).first()

    @staticmethod
    def get_primary(db: Session, store_pk: int) -> Optional[MerchantStoreBankAccount]:
        return db.query(MerchantStoreBankAccount).filter(
            MerchantStoreBankAccount.store_id == store_pk,
            MerchantStoreBankAccount.is_primary.is_(True),
            MerchantStoreBankAccount.is_active.is_(True),
        ).order_by(MerchantStoreBankAccount.updated_at.desc()).first()

    @staticmethod
    def count_active(db: Session, store_pk: int) -> int:
        return db.query(MerchantStoreBankAccount).filter(
            MerchantStoreBankAccount.store_id == store_pk,
            MerchantStoreBankAccount.is_active.is_(True),
        ).count()

    @staticmethod
    def add(db: Session, account: MerchantStoreBankAccount) -> MerchantStoreBankAccount:
        db.add(account)
        db.flush()
        return account

    @staticmethod
    def save(db: Session, account: MerchantStoreBankAccount) -> MerchantStoreBankAccount:
        db.commit()
        db.refresh(account)
        return account
