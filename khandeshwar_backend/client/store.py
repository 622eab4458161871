"""
Session-scoped cache over the record service.

Collections are fetched on first use and kept for the session. Writes go
to the service and the cached lists are reconciled with what it returns;
derived reports are recomputed from the cached transactions on every call.
"""
import logging
from typing import Optional

from khandeshwar_backend.errors import DUPLICATE_SUBMISSION, RECEIPT_EXISTS
from khandeshwar_backend.security import ADMIN_ROLES, WRITE_ROLES
from khandeshwar_backend.utils.csv_io import export_csv
from khandeshwar_backend.utils.pdf import build_report_pdf
from khandeshwar_backend.utils.reports import ReportFilters, filter_transactions, render_html, summarize

from .api import ApiRequestError

log = logging.getLogger(__name__)

ENDPOINTS = {
    "shops": "/shops",
    "tenants": "/tenants",
    "agreements": "/agreements",
    "loans": "/loans",
    "penalties": "/penalties",
    "donations": "/donations",
    "expenses": "/expenses",
    "rent_payments": "/rent/payments",
    "transactions": "/transactions",
    "users": "/users",
}

# transaction type -> per-type collection
_TYPE_COLLECTIONS = {
    "Donation": "donations",
    "Expense": "expenses",
    "Utilities": "expenses",
    "Salary": "expenses",
    "RentIncome": "rent_payments",
}


class PermissionDeniedError(Exception):
    pass


class ReceiptConflictError(Exception):
    """The receipt number was taken; ``receipt_number`` is the fresh preview."""

    def __init__(self, reason, receipt_number):
        super().__init__(reason)
        self.reason = reason
        self.receipt_number = receipt_number


class DataStore:
    def __init__(self, api):
        self.api = api
        self._cache = {}

    # --- session ----------------------------------------------------------
    @property
    def user(self) -> Optional[dict]:
        return self.api.session.user if self.api.session else None

    @property
    def role(self):
        return (self.user or {}).get("role")

    def login(self, identifier, password):
        field = "email" if "@" in identifier else "username"
        data = self.api.post("/auth/login", {field: identifier, "password": password})
        self.api.session.save(data["token"], data["user"], data.get("refresh_token"))
        self._cache.clear()
        log.info("Signed in as %s (%s)", data["user"].get("username"), data["user"].get("role"))
        return data["user"]

    def refresh_session(self):
        """Trade the stored refresh token for a new token pair."""
        session = self.api.session
        if not session or not session.refresh_token:
            raise PermissionDeniedError("No refresh token; sign in again")
        data = self.api.post("/auth/refresh", headers={"Authorization": f"Bearer {session.refresh_token}"})
        session.save(data["token"], data["user"], data.get("refresh_token"))
        return data["user"]

    def logout(self):
        self.api.session.clear()
        self._cache.clear()

    def _require(self, roles):
        if self.role not in roles:
            raise PermissionDeniedError(f"Role '{self.role}' cannot perform this action")

    # --- cache ------------------------------------------------------------
    def collection(self, name, refresh=False) -> list:
        if refresh or name not in self._cache:
            self._cache[name] = list(self.api.get(ENDPOINTS[name]) or [])
        return self._cache[name]

    def cached(self, name) -> bool:
        return name in self._cache

    def invalidate(self, *names):
        for name in names or list(self._cache):
            self._cache.pop(name, None)

    def _upsert(self, name, item):
        if name not in self._cache or not item:
            return item
        items = self._cache[name]
        for i, existing in enumerate(items):
            if existing.get("id") == item.get("id"):
                items[i] = item
                break
        else:
            items.insert(0, item)
        return item

    def _remove(self, name, item_id):
        if name in self._cache:
            self._cache[name] = [x for x in self._cache[name] if x.get("id") != item_id]

    def _track_transaction(self, txn):
        self._upsert("transactions", txn)
        self._upsert(_TYPE_COLLECTIONS.get(txn.get("type"), "expenses"), txn)
        return txn

    def _forget_transaction(self, txn_id):
        for name in ("transactions", "donations", "expenses", "rent_payments"):
            self._remove(name, txn_id)

    # --- plain entities ---------------------------------------------------
    def _create(self, name, payload):
        self._require(WRITE_ROLES)
        return self._upsert(name, self.api.post(ENDPOINTS[name], payload))

    def _update(self, name, item_id, changes):
        self._require(WRITE_ROLES)
        return self._upsert(name, self.api.put(f"{ENDPOINTS[name]}/{item_id}", changes))

    def _delete(self, name, item_id):
        self._require(WRITE_ROLES)
        self.api.delete(f"{ENDPOINTS[name]}/{item_id}")
        self._remove(name, item_id)

    def create_shop(self, payload):
        return self._create("shops", payload)

    def update_shop(self, shop_id, changes):
        return self._update("shops", shop_id, changes)

    def delete_shop(self, shop_id):
        self._delete("shops", shop_id)

    def create_tenant(self, payload):
        return self._create("tenants", payload)

    def update_tenant(self, tenant_id, changes):
        return self._update("tenants", tenant_id, changes)

    def delete_tenant(self, tenant_id):
        self._delete("tenants", tenant_id)

    # --- agreements, loans, penalties -------------------------------------
    def create_agreement(self, payload):
        self._require(WRITE_ROLES)
        # the deposit booking rides next to ``data`` in the envelope
        body = self.api.post(ENDPOINTS["agreements"], payload, raw=True).json()
        agreement = self._upsert("agreements", body["data"])
        if body.get("deposit_transaction"):
            self._track_transaction(body["deposit_transaction"])
        self.invalidate("shops")
        return agreement

    def update_agreement(self, agreement_id, changes):
        agreement = self._update("agreements", agreement_id, changes)
        self.invalidate("shops")
        return agreement

    def create_loan(self, payload):
        loan = self._create("loans", payload)
        self.invalidate("agreements")
        return loan

    def update_loan(self, loan_id, changes):
        loan = self._update("loans", loan_id, changes)
        self.invalidate("agreements")
        return loan

    def pay_loan(self, loan_id, amount=None, payment_date=None):
        self._require(WRITE_ROLES)
        body = {"amount": amount, "payment_date": payment_date}
        loan = self.api.post(f"/loans/{loan_id}/pay", {k: v for k, v in body.items() if v is not None})
        self._upsert("loans", loan)
        if loan.get("status") != "Active":
            self.invalidate("agreements")
        return loan

    def create_penalty(self, payload):
        penalty = self._create("penalties", payload)
        self.invalidate("agreements")
        return penalty

    def settle_penalty(self, penalty_id, paid_date=None):
        self._require(WRITE_ROLES)
        body = {"paid_date": paid_date} if paid_date else {}
        penalty = self._upsert("penalties", self.api.post(f"/penalties/{penalty_id}/settle", body))
        self.invalidate("agreements")
        return penalty

    def delete_penalty(self, penalty_id):
        self._delete("penalties", penalty_id)
        self.invalidate("agreements")

    # --- money ------------------------------------------------------------
    def next_donation_receipt(self):
        return self.api.get("/donations/next-receipt-number")["receipt_number"]

    def next_rent_receipt(self):
        return self.api.get("/rent/next-receipt-number")["receipt_number"]

    def _post_receipted(self, path, payload, preview):
        self._require(WRITE_ROLES)
        try:
            txn = self.api.post(path, payload)
        except ApiRequestError as e:
            if e.status == 409 and e.error in (RECEIPT_EXISTS, DUPLICATE_SUBMISSION):
                fresh = preview()
                log.info("%s on %s; next receipt is %s", e.error, path, fresh)
                raise ReceiptConflictError(e.error, fresh) from e
            raise
        return self._track_transaction(txn)

    def create_donation(self, payload):
        return self._post_receipted("/donations", payload, self.next_donation_receipt)

    def update_donation(self, txn_id, changes):
        self._require(WRITE_ROLES)
        return self._track_transaction(self.api.put(f"/donations/{txn_id}", changes))

    def delete_donation(self, txn_id):
        self._require(WRITE_ROLES)
        self.api.delete(f"/donations/{txn_id}")
        self._forget_transaction(txn_id)

    def create_expense(self, payload):
        self._require(WRITE_ROLES)
        return self._track_transaction(self.api.post("/expenses", payload))

    def update_expense(self, txn_id, changes):
        self._require(WRITE_ROLES)
        return self._track_transaction(self.api.put(f"/expenses/{txn_id}", changes))

    def delete_expense(self, txn_id):
        self._require(WRITE_ROLES)
        self.api.delete(f"/expenses/{txn_id}")
        self._forget_transaction(txn_id)

    def create_rent_payment(self, payload):
        return self._post_receipted("/rent/payments", payload, self.next_rent_receipt)

    def delete_rent_payment(self, txn_id):
        self._require(WRITE_ROLES)
        self.api.delete(f"/rent/payments/{txn_id}")
        self._forget_transaction(txn_id)

    def collect_rent(self, payload) -> dict:
        """
        Run a composite collection. Whatever was booked is refreshed even
        when a later step failed; the failure is re-raised afterwards.
        """
        self._require(WRITE_ROLES)
        try:
            result = self.api.post("/rent/collect", payload)
        except ApiRequestError as e:
            if (e.payload or {}).get("data"):
                self.invalidate("agreements", "loans", "penalties", "rent_payments", "transactions")
            raise
        self.invalidate("agreements", "loans", "penalties", "rent_payments", "transactions")
        return result

    def import_csv(self, text):
        self._require(WRITE_ROLES)
        result = self.api.post("/transactions/import", {"csv": text})
        self.invalidate("transactions", "donations", "expenses", "rent_payments")
        return result

    # --- users ------------------------------------------------------------
    def create_user(self, payload):
        self._require(ADMIN_ROLES)
        return self._upsert("users", self.api.post("/users", payload))

    def update_user(self, user_id, changes):
        self._require(ADMIN_ROLES)
        return self._upsert("users", self.api.put(f"/users/{user_id}", changes))

    def deactivate_user(self, user_id):
        self._require(ADMIN_ROLES)
        return self._upsert("users", self.api.delete(f"/users/{user_id}"))

    # --- reports ----------------------------------------------------------
    def filtered_transactions(self, filters: Optional[ReportFilters] = None) -> list:
        return filter_transactions(self.collection("transactions"), filters)

    def summary(self, filters: Optional[ReportFilters] = None):
        return summarize(self.filtered_transactions(filters))

    def export_csv(self, kind, filters: Optional[ReportFilters] = None) -> str:
        return export_csv(kind, self.filtered_transactions(filters))

    def export_html(self, kind, filters: Optional[ReportFilters] = None) -> str:
        return render_html(kind, self.filtered_transactions(filters))

    def export_pdf(self, kind, filters: Optional[ReportFilters] = None, language="en", unicode_font=None) -> bytes:
        return build_report_pdf(kind, self.filtered_transactions(filters), filters,
                                language=language, unicode_font=unicode_font)
