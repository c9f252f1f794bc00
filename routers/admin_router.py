from fastapi import APIRouter, Depends, HTTPException, Header, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime, timezone
from core.database import get_db
from core.config import ADMIN_API_KEY, CRON_SECRET
from repositories.merchant_store_repository import MerchantStoreRepository
from repositories.verification_attempt_repository import VerificationAttemptRepository
from repositories.verification_limits_repository import VerificationLimitsRepository
from schemas.bank_schema import VerificationAttemptListResponse, VerificationAttemptOut
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin Panel"])

def verify_admin_key(x_admin_key: str = Header(..., description="Admin API key")):
    if not ADMIN_API_KEY or x_admin_key != ADMIN_API_KEY:
        raise HTTPException(status_code=403, detail="Invalid admin API key")
    return x_admin_key

def verify_cron_secret(authorization: Optional[str] = Header(None)):
    if CRON_SECRET and authorization != f"Bearer {CRON_SECRET}":
        raise HTTPException(status_code=401, detail="Unauthorized")
    return authorization

@router.post("/verification-limits/reset")
def reset_verification_limits(
    db: Session = Depends(get_db),
    _: Optional[str] = Depends(verify_cron_secret),
):
    try:
        today = datetime.now(timezone.utc).date()
        reset = VerificationLimitsRepository.reset_stale(db, today)
        logger.info(f"Verification limits reset for {reset} store(s)")
        if not reset:
            return {"success": True, "reset": 0, "message": "No limits to reset"}
        return {"success": True, "reset": reset}
    except Exception as e:
        db.rollback()
        logger.error(f"Verification limits reset failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to reset verification limits")

@router.get("/verification-attempts", response_model=VerificationAttemptListResponse)
def list_verification_attempts(
    store_id: str = Query(..., description="Public store id"),
    start: Optional[datetime] = Query(None, description="From (inclusive)"),
    end: Optional[datetime] = Query(None, description="To (inclusive)"),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    _: str = Depends(verify_admin_key),
):
    store = MerchantStoreRepository.get_by_public_id(db, store_id)
    if not store:
        raise HTTPException(404, f"Store {store_id} not found")

    attempts = VerificationAttemptRepository.get_by_store_in_range(db, store.id, start, end, limit)
    return VerificationAttemptListResponse(
        store_id=store.store_id,
        total=len(attempts),
        attempts=[
            VerificationAttemptOut(
                id=a.id,
                attempt_type=a.attempt_type,
                status=a.status,
                bank_account_id=a.bank_account_id,
                upi_account_id=a.upi_account_id,
                reference_id=(a.attempt_metadata or {}).get("reference_id"),
                created_at=a.created_at,
            )
            for a in attempts
        ],
    )
