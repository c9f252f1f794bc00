import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from core.deps import get_current_merchant, get_verification_service
from schemas.bank_schema import (
    AccountVerificationRequest, BankVerificationRequest, UpiVerificationRequest,
    ConfirmVerificationRequest, VerificationResponse, VerificationStatusResponse,
)
from services.bank_verification_service import BankVerificationService
from services.identity_service import MerchantIdentity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/merchant/bank-account", tags=["Bank Verification"])


def _run_verification(service: BankVerificationService, identity: MerchantIdentity, request) -> VerificationResponse:
    try:
        result = service.verify(identity, request)
        return VerificationResponse(**result)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"{request.account_type} verification error for store {request.store_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Verification service temporarily unavailable")


@router.post("/verify", response_model=VerificationResponse)
def verify_account(
    request: AccountVerificationRequest,
    identity: MerchantIdentity = Depends(get_current_merchant),
    service: BankVerificationService = Depends(get_verification_service),
):
    return _run_verification(service, identity, request)


@router.post("/verify-bank", response_model=VerificationResponse)
def verify_bank(
    request: BankVerificationRequest,
    identity: MerchantIdentity = Depends(get_current_merchant),
    service: BankVerificationService = Depends(get_verification_service),
):
    return _run_verification(service, identity, request)


@router.post("/verify-upi", response_model=VerificationResponse)
def verify_upi(
    request: UpiVerificationRequest,
    identity: MerchantIdentity = Depends(get_current_merchant),
    service: BankVerificationService = Depends(get_verification_service),
):
    return _run_verification(service, identity, request)


@router.get("/verify/status", response_model=VerificationStatusResponse)
def verification_status(
    store_id: str = Query(..., description="Public store id"),
    identity: MerchantIdentity = Depends(get_current_merchant),
    service: BankVerificationService = Depends(get_verification_service),
):
    try:
        return VerificationStatusResponse(**service.get_status(identity, store_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Verification status error for store {store_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch verification status")


@router.post("/verify/confirm", response_model=VerificationResponse)
def confirm_verification(
    request: ConfirmVerificationRequest,
    identity: MerchantIdentity = Depends(get_current_merchant),
    service: BankVerificationService = Depends(get_verification_service),
):
    try:
        return VerificationResponse(**service.confirm_pending(identity, request))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Confirm verification error for store {request.store_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Verification service temporarily unavailable")
