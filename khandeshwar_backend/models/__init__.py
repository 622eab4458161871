import uuid
from datetime import datetime

from khandeshwar_backend.extensions import db


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.utcnow()


def money(value):
    return float(value) if value is not None else None


def iso(value):
    return value.isoformat() if value is not None else None


# Core Models
from .user import User
from .shop import Shop
from .tenant import Tenant
from .agreement import Agreement, agreement_pending_penalties
from .loan import Loan, LoanPayment
from .penalty import RentPenalty
from .transaction import Transaction
from .receipt import ReceiptCounter
