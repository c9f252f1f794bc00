from typing import Optional
from fastapi import Depends, Header
from sqlalchemy.orm import Session
from core.database import get_db
from services.identity_service import IdentityResolver, MerchantIdentity
from services.bank_verification_service import BankVerificationService


def get_session_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_merchant(
    token: Optional[str] = Depends(get_session_token),
    db: Session = Depends(get_db),
) -> MerchantIdentity:
    return IdentityResolver.resolve(db, token)


def get_verification_service(db: Session = Depends(get_db)) -> BankVerificationService:
    return BankVerificationService(db)
