"""
Request schemas.

Every JSON body accepted by the API is validated with one of these pydantic
models. Validation failures surface as HTTP 422 with ``[{path, message}]``
details (see ``errors.register_error_handlers``).
"""
import re
import datetime as dt
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .constants import VARGANI

_TEN_DIGITS = re.compile(r"^\d{10}$")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

Role = Literal["Admin", "Treasurer", "Viewer"]
ActiveStatus = Literal["Active", "Inactive"]


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _ten_digits(v, label="Contact"):
    if v is not None and not _TEN_DIGITS.match(v):
        raise ValueError(f"{label} must be exactly 10 digits")
    return v


def _email(v):
    if v is not None and not _EMAIL.match(v):
        raise ValueError("Invalid email address")
    return v


class Schema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    def changes(self) -> dict:
        """Fields the caller actually sent (for partial updates)."""
        return self.model_dump(exclude_unset=True)


# ---------------- Auth / users ----------------

class LoginRequest(Schema):
    email: Optional[str] = None
    username: Optional[str] = None
    password: str = Field(min_length=1)

    blanks_to_none = field_validator("email", "username", mode="before")(_blank_to_none)


class UserCreate(Schema):
    username: str = Field(min_length=3, max_length=80)
    email: str = Field(max_length=120)
    password: str = Field(min_length=6)
    role: Role = "Viewer"
    status: ActiveStatus = "Active"

    check_email = field_validator("email")(_email)


class UserUpdate(Schema):
    username: Optional[str] = Field(default=None, min_length=3, max_length=80)
    email: Optional[str] = Field(default=None, max_length=120)
    password: Optional[str] = Field(default=None, min_length=6)
    role: Optional[Role] = None
    status: Optional[ActiveStatus] = None

    check_email = field_validator("email")(_email)


# ---------------- Shops / tenants ----------------

class ShopCreate(Schema):
    shop_number: str = Field(min_length=1, max_length=20)
    size: Decimal = Field(gt=0)
    monthly_rent: Decimal = Field(gt=0)
    deposit: Decimal = Field(default=Decimal("0"), ge=0)
    status: Literal["Vacant", "Maintenance"] = "Vacant"
    description: Optional[str] = None


class ShopUpdate(Schema):
    shop_number: Optional[str] = Field(default=None, min_length=1, max_length=20)
    size: Optional[Decimal] = Field(default=None, gt=0)
    monthly_rent: Optional[Decimal] = Field(default=None, gt=0)
    deposit: Optional[Decimal] = Field(default=None, ge=0)
    status: Optional[Literal["Vacant", "Occupied", "Maintenance"]] = None
    description: Optional[str] = None


class TenantCreate(Schema):
    name: str = Field(min_length=2, max_length=120)
    phone: str
    email: Optional[str] = None
    address: str = Field(min_length=1)
    business_type: str = Field(min_length=1, max_length=100)
    status: ActiveStatus = "Active"
    id_proof: Optional[str] = None

    blanks_to_none = field_validator("email", "id_proof", mode="before")(_blank_to_none)
    check_email = field_validator("email")(_email)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return _ten_digits(v, "Phone")


class TenantUpdate(Schema):
    name: Optional[str] = Field(default=None, min_length=2, max_length=120)
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = Field(default=None, min_length=1)
    business_type: Optional[str] = Field(default=None, min_length=1, max_length=100)
    status: Optional[ActiveStatus] = None
    id_proof: Optional[str] = None

    check_email = field_validator("email")(_email)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return _ten_digits(v, "Phone")


# ---------------- Agreements / loans / penalties ----------------

class AgreementCreate(Schema):
    shop_id: str = Field(min_length=1)
    tenant_id: str = Field(min_length=1)
    agreement_date: dt.date
    duration: int = Field(gt=0)
    monthly_rent: Optional[Decimal] = Field(default=None, gt=0)
    security_deposit: Decimal = Field(default=Decimal("0"), ge=0)
    advance_rent: Decimal = Field(default=Decimal("0"), ge=0)
    agreement_type: Literal["Residential", "Commercial"] = "Commercial"


class AgreementUpdate(Schema):
    agreement_date: Optional[dt.date] = None
    duration: Optional[int] = Field(default=None, gt=0)
    monthly_rent: Optional[Decimal] = Field(default=None, gt=0)
    security_deposit: Optional[Decimal] = Field(default=None, ge=0)
    advance_rent: Optional[Decimal] = Field(default=None, ge=0)
    agreement_type: Optional[Literal["Residential", "Commercial"]] = None
    status: Optional[Literal["Active", "Expired", "Terminated"]] = None
    next_due_date: Optional[dt.date] = None
    last_payment_date: Optional[dt.date] = None


class LoanCreate(Schema):
    agreement_id: str = Field(min_length=1)
    tenant_id: str = Field(min_length=1)
    loan_amount: Decimal = Field(gt=0)
    interest_rate: Decimal = Field(ge=0)
    disbursed_date: dt.date
    loan_duration: int = Field(gt=0)


class LoanUpdate(Schema):
    status: Optional[Literal["Active", "Completed", "Defaulted"]] = None
    next_emi_date: Optional[dt.date] = None


class LoanPaymentRequest(Schema):
    amount: Optional[Decimal] = Field(default=None, gt=0)
    payment_date: Optional[dt.date] = None


class PenaltyCreate(Schema):
    agreement_id: str = Field(min_length=1)
    rent_amount: Decimal = Field(gt=0)
    due_date: dt.date
    penalty_rate: Decimal = Field(gt=0, le=100)


class PenaltySettle(Schema):
    paid_date: Optional[dt.date] = None


# ---------------- Transactions ----------------

class DonationCreate(Schema):
    date: dt.date
    category: str = Field(min_length=1, max_length=100)
    sub_category: Optional[str] = None
    description: str = Field(min_length=1)
    donor_name: str = Field(min_length=1, max_length=120)
    donor_contact: Optional[str] = None
    family_members: Optional[int] = Field(default=None, validate_default=True)
    amount_per_person: Optional[Decimal] = Field(default=None, validate_default=True)
    amount: Optional[Decimal] = Field(default=None, validate_default=True)
    receipt_number: Optional[str] = None
    idempotency_key: Optional[str] = None

    blanks_to_none = field_validator(
        "sub_category", "donor_contact", "receipt_number", "idempotency_key", mode="before"
    )(_blank_to_none)

    @field_validator("donor_contact")
    @classmethod
    def check_contact(cls, v):
        return _ten_digits(v, "Donor contact")

    @field_validator("family_members", "amount_per_person")
    @classmethod
    def check_vargani_inputs(cls, v, info: ValidationInfo):
        if info.data.get("category") == VARGANI and (v is None or v <= 0):
            raise ValueError(f"{info.field_name} must be greater than 0 for {VARGANI}")
        return v

    @field_validator("amount")
    @classmethod
    def check_amount(cls, v, info: ValidationInfo):
        if info.data.get("category") == VARGANI:
            members = info.data.get("family_members")
            per_person = info.data.get("amount_per_person")
            if members and per_person:
                return Decimal(members) * per_person
            return v
        if v is None:
            raise ValueError("Amount is required")
        if v <= 0:
            raise ValueError("Amount must be positive")
        return v


class ExpenseCreate(Schema):
    date: dt.date
    type: Literal["Expense", "Utilities", "Salary"] = "Expense"
    category: str = Field(min_length=1, max_length=100)
    sub_category: Optional[str] = None
    description: str = Field(min_length=1)
    amount: Decimal = Field(gt=0)
    payee_name: str = Field(min_length=1, max_length=120)
    payee_contact: Optional[str] = None
    vendor: Optional[str] = None
    receipt_number: Optional[str] = None
    idempotency_key: Optional[str] = None

    blanks_to_none = field_validator(
        "sub_category", "payee_contact", "vendor", "receipt_number", "idempotency_key", mode="before"
    )(_blank_to_none)

    @field_validator("payee_contact")
    @classmethod
    def check_contact(cls, v):
        return _ten_digits(v, "Payee contact")


class RentPaymentCreate(Schema):
    date: dt.date
    amount: Decimal = Field(gt=0)
    agreement_id: Optional[str] = None
    category: str = Field(default="Bhade Jama", min_length=1)
    sub_category: Optional[str] = "bhade1Jama"
    description: Optional[str] = None
    tenant_name: Optional[str] = None
    tenant_contact: Optional[str] = None
    shop_number: Optional[str] = None
    payment_method: Optional[str] = None
    receipt_number: Optional[str] = None
    idempotency_key: Optional[str] = None

    blanks_to_none = field_validator(
        "agreement_id", "tenant_contact", "receipt_number", "idempotency_key", mode="before"
    )(_blank_to_none)

    @field_validator("tenant_contact")
    @classmethod
    def check_contact(cls, v):
        return _ten_digits(v, "Tenant contact")


class RentCollectionRequest(Schema):
    agreement_id: str = Field(min_length=1)
    date: Optional[dt.date] = None
    payment_method: Optional[str] = None

    collect_rent: bool = False
    rent_amount: Optional[Decimal] = Field(default=None, ge=0)

    collect_emi: bool = False
    emi_amount: Optional[Decimal] = Field(default=None, ge=0)
    loan_id: Optional[str] = None

    collect_penalty: bool = False
    penalty_amount: Optional[Decimal] = Field(default=None, ge=0)
    penalty_id: Optional[str] = None

    blanks_to_none = field_validator("loan_id", "penalty_id", mode="before")(_blank_to_none)
