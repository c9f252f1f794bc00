import random
import secrets
from datetime import datetime, timezone, timedelta
from faker import Faker
from sqlalchemy import delete
from core.database import SessionLocal, Base, engine
from models.dummy_bank_account import DummyBankAccount
from models.merchant_store import MerchantParent, MerchantStore
from models.merchant_session import MerchantSession
from repositories.merchant_store_repository import MerchantStoreRepository
import models.bank_account
import models.upi_account
import models.verification_attempt
import models.verification_limits

STORE_COUNT = 20
SESSION_DAYS = 30

IFSC_PREFIXES = {
    "State Bank of India": "SBIN",
    "HDFC Bank": "HDFC",
    "ICICI Bank": "ICIC",
    "Axis Bank": "UTIB",
    "Kotak Mahindra Bank": "KKBK",
    "Bank of Baroda": "BARB",
}
UPI_HANDLES = ["okaxis", "oksbi", "okhdfcbank", "okicici", "ybl", "paytm"]
STORE_KINDS = ["Foods", "Kitchen", "Tiffins", "Sweets", "Bakery", "Cafe"]

fake = Faker("en_IN")
Faker.seed(7)
random.seed(7)


def account_number_for(index: int) -> str:
    # 11-14 digits, unique by construction
    return f"{index:04d}{fake.numerify('#' * random.randint(7, 10))}"


def ifsc_for(bank_name: str) -> str:
    return f"{IFSC_PREFIXES[bank_name]}0{fake.bothify('??####').upper()}"


def upi_for(owner: str) -> str:
    handle = owner.lower().replace(" ", ".").replace("'", "")
    return f"{handle}{random.randint(1, 99)}@{random.choice(UPI_HANDLES)}"


def seed_store(db, index: int, owner: str) -> MerchantStore:
    store_code = f"STORE{index:04d}"
    store = MerchantStoreRepository.get_by_public_id(db, store_code)
    if store:
        return store

    parent = MerchantParent(
        parent_name=f"{owner.split()[-1]} Enterprises",
        owner_name=owner,
        owner_email=fake.free_email(),
    )
    db.add(parent)
    db.flush()

    store_name = f"{owner.split()[0]}'s {random.choice(STORE_KINDS)}"
    store = MerchantStore(
        store_id=store_code,
        parent_id=parent.id,
        store_name=store_name,
        store_display_name=store_name,
        owner_name=owner,
        store_email=fake.company_email(),
        store_phone=fake.msisdn()[:10],
    )
    db.add(store)
    db.flush()
    return store


Base.metadata.create_all(bind=engine, checkfirst=True)
db = SessionLocal()

print("Removing old dummy accounts and sessions...")
db.execute(delete(MerchantSession))
db.execute(delete(DummyBankAccount))
db.commit()

try:
    for index in range(1, STORE_COUNT + 1):
        store = seed_store(db, index, fake.name())
        bank_name = random.choice(list(IFSC_PREFIXES))
        db.add(DummyBankAccount(
            account_number=account_number_for(index),
            ifsc=ifsc_for(bank_name),
            bank_name=bank_name,
            account_holder_name=store.owner_name,
            upi_id=upi_for(store.owner_name),
            # roughly one in five accounts is closed
            is_active=random.random() > 0.2,
        ))

        token = secrets.token_urlsafe(32)
        db.add(MerchantSession(
            token=token,
            merchant_parent_id=store.parent_id,
            expires_at=datetime.now(timezone.utc) + timedelta(days=SESSION_DAYS),
        ))
        print(f"{store.store_id}  owner={store.owner_name}  token={token}")

    db.commit()
    print(f"Seeded {STORE_COUNT} stores with dummy bank accounts.")

except Exception as e:
    db.rollback()
    print(f"Seeding failed: {e}")
    raise

finally:
    db.close()
