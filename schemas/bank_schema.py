from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_core import PydanticCustomError

BANK_REQUIRED_FIELDS = ("account_holder_name", "account_number", "ifsc_code", "bank_name")
UPI_REQUIRED_FIELDS = ("upi_id",)


def _strip(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = str(v).strip()
    return v or None


def _with_missing_fields(cls, data, handler, required):
    # format errors stop validation before the service sees the request, so
    # missing required fields are reported in the same error
    try:
        return handler(data)
    except ValidationError as e:
        if not isinstance(data, dict):
            raise
        missing = [field for field in required if _strip(data.get(field)) is None]
        if not missing:
            raise
        line_errors = [
            {"type": PydanticCustomError(err["type"], err["msg"]), "loc": err["loc"], "input": err.get("input")}
            for err in e.errors(include_url=False)
        ]
        line_errors += [{"type": "missing", "loc": (field,), "input": data} for field in missing]
        raise ValidationError.from_exception_data(cls.__name__, line_errors)


class BankVerificationRequest(BaseModel):
    account_type: Literal["bank"] = "bank"
    store_id: str = Field(..., min_length=1, max_length=40)
    bank_account_id: Optional[int] = None
    # presence is checked by the service; format errors list missing fields too
    account_holder_name: Optional[str] = Field(None, max_length=150)
    account_number: Optional[str] = Field(None, max_length=30)
    ifsc_code: Optional[str] = Field(None, max_length=15)
    bank_name: Optional[str] = Field(None, max_length=100)
    branch_name: Optional[str] = Field(None, max_length=100)

    @model_validator(mode="wrap")
    @classmethod
    def report_missing_fields(cls, data, handler):
        return _with_missing_fields(cls, data, handler, BANK_REQUIRED_FIELDS)

    @field_validator("account_holder_name", "bank_name", "branch_name", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator("account_number", mode="before")
    @classmethod
    def validate_account_number(cls, v):
        v = _strip(v)
        if v is None:
            return None
        v = v.replace(" ", "")
        if not v.isdigit():
            raise ValueError("Account number must contain only digits")
        if len(v) < 8 or len(v) > 20:
            raise ValueError("Account number must be between 8-20 digits")
        return v

    @field_validator("ifsc_code", mode="before")
    @classmethod
    def validate_ifsc(cls, v):
        v = _strip(v)
        if v is None:
            return None
        v = v.upper()
        if len(v) != 11:
            raise ValueError("IFSC code must be exactly 11 characters")
        if not v[:4].isalpha():
            raise ValueError("First 4 characters of IFSC must be letters")
        if v[4] != "0":
            raise ValueError("5th character of IFSC must be 0")
        if not v[5:].isalnum():
            raise ValueError("Last 6 characters of IFSC must be alphanumeric")
        return v


class UpiVerificationRequest(BaseModel):
    account_type: Literal["upi"] = "upi"
    store_id: str = Field(..., min_length=1, max_length=40)
    upi_id: Optional[str] = Field(None, max_length=100)
    holder_name: Optional[str] = Field(None, max_length=150)

    @model_validator(mode="wrap")
    @classmethod
    def report_missing_fields(cls, data, handler):
        return _with_missing_fields(cls, data, handler, UPI_REQUIRED_FIELDS)

    @field_validator("upi_id", mode="before")
    @classmethod
    def normalize_upi(cls, v):
        v = _strip(v)
        return v.lower() if v else None

    @field_validator("holder_name", mode="before")
    @classmethod
    def strip_holder(cls, v):
        return _strip(v)


AccountVerificationRequest = Annotated[
    Union[BankVerificationRequest, UpiVerificationRequest],
    Field(discriminator="account_type"),
]


class VerificationResponse(BaseModel):
    success: bool = True
    status: Literal["processing", "verified", "failed"]
    beneficiary_name: Optional[str] = None
    message: str


class ConfirmVerificationRequest(BaseModel):
    store_id: str = Field(..., min_length=1, max_length=40)
    account_type: Literal["bank", "upi"] = "bank"
    bank_account_id: Optional[int] = None


class VerificationStatusResponse(BaseModel):
    success: bool = True
    verified: bool
    verification_status: str
    can_edit: bool
    can_try_verify: bool
    bank_attempts_today: int
    upi_attempts_today: int
    max_bank_attempts_per_day: int
    max_upi_attempts_per_day: int
    upi_verification_status: Optional[str] = None


class VerificationAttemptOut(BaseModel):
    id: int
    attempt_type: str
    status: str
    bank_account_id: Optional[int] = None
    upi_account_id: Optional[int] = None
    reference_id: Optional[str] = None
    created_at: datetime


class VerificationAttemptListResponse(BaseModel):
    store_id: str
    total: int
    attempts: List[VerificationAttemptOut]
