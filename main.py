import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from core.database import Base, engine
from core.exceptions import VerificationError, ConfigurationError
from routers.bank_router import router as bank_router
from routers.admin_router import router as admin_router
import models.merchant_store
import models.merchant_session
import models.bank_account
import models.upi_account
import models.verification_attempt
import models.verification_limits
import models.dummy_bank_account

logging.basicConfig( level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting merchant bank verification backend...")
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("Database tables created")

    yield

    logger.info("Merchant bank verification backend stopped")

app = FastAPI(title="Merchant Bank Verification", lifespan=lifespan)

app.include_router(bank_router)
app.include_router(admin_router)

@app.exception_handler(VerificationError)
async def verification_error_handler(request: Request, exc: VerificationError):
    if isinstance(exc, ConfigurationError):
        logger.error(f"Configuration error on {request.url.path}: {exc.operator_detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)

@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    fields = []
    messages = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
        # discriminated unions prefix the location with the union tag
        field = loc[-1] if loc else "body"
        if field not in fields:
            fields.append(field)
        messages.append(f"{field}: {error.get('msg')}")
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "kind": "validation_error",
            "message": "; ".join(messages) or "Invalid request",
            "fields": fields,
        },
    )

@app.get("/")
def root():
    return {
        "status":"Merchant Bank Verification API is running"
    }
