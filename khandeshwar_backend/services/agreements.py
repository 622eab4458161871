import logging
from decimal import Decimal

from khandeshwar_backend.constants import DEPOSIT_CATEGORY, DEPOSIT_SUB_CATEGORY
from khandeshwar_backend.errors import ConflictError, NotFoundError
from khandeshwar_backend.extensions import db
from khandeshwar_backend.models import Agreement, Shop, Tenant
from khandeshwar_backend.services import receipts, transactions
from khandeshwar_backend.utils.dates import add_months

log = logging.getLogger(__name__)

CLOSED_STATUSES = ('Terminated', 'Expired')


def get_agreement(agreement_id: str) -> Agreement:
    agreement = db.session.get(Agreement, agreement_id)
    if agreement is None:
        raise NotFoundError("Agreement not found")
    return agreement


def _active_agreement_for_shop(shop_id, exclude_id=None):
    q = Agreement.query.filter_by(shop_id=shop_id, status='Active')
    if exclude_id:
        q = q.filter(Agreement.id != exclude_id)
    return q.first()


def create_agreement(data: dict):
    """
    Open an agreement on a vacant shop.

    Occupies the shop and, when a security deposit or advance rent is
    taken, books it as RentIncome under the next rent receipt number.
    Returns ``(agreement, deposit_transaction_or_None)``.
    """
    shop = db.session.get(Shop, data['shop_id'])
    if shop is None:
        raise NotFoundError("Shop not found")
    tenant = db.session.get(Tenant, data['tenant_id'])
    if tenant is None:
        raise NotFoundError("Tenant not found")

    if shop.status != 'Vacant' or _active_agreement_for_shop(shop.id):
        raise ConflictError(f"Shop {shop.shop_number} is not vacant")
    if tenant.status != 'Active':
        raise ConflictError(f"Tenant {tenant.name} is not active")

    agreement_date = data['agreement_date']
    agreement = Agreement(
        shop_id=shop.id,
        tenant_id=tenant.id,
        agreement_date=agreement_date,
        duration=data['duration'],
        monthly_rent=data.get('monthly_rent') or shop.monthly_rent,
        security_deposit=data.get('security_deposit') or Decimal('0'),
        advance_rent=data.get('advance_rent') or Decimal('0'),
        agreement_type=data.get('agreement_type') or 'Commercial',
        status='Active',
        next_due_date=add_months(agreement_date, 1),
    )
    db.session.add(agreement)
    db.session.flush()
    shop.occupy(tenant.id, agreement.id)

    deposit_txn = None
    upfront = Decimal(agreement.security_deposit) + Decimal(agreement.advance_rent)
    if upfront > 0:
        deposit_txn = transactions.record(
            {
                'date': agreement_date,
                'type': 'RentIncome',
                'category': DEPOSIT_CATEGORY,
                'sub_category': DEPOSIT_SUB_CATEGORY,
                'description': f"Security deposit and advance rent for Shop {shop.shop_number}",
                'amount': upfront,
                'tenant_name': tenant.name,
                'tenant_contact': tenant.phone,
                'agreement_id': agreement.id,
                'shop_number': shop.shop_number,
            },
            receipt_kind=receipts.RENT,
            commit=False,
        )

    db.session.commit()
    log.info("Agreement %s opened for shop %s", agreement.id, shop.shop_number)
    return agreement, deposit_txn


def update_agreement(agreement: Agreement, changes: dict) -> Agreement:
    """
    Apply a partial update. Closing an agreement frees its shop; loans and
    penalties raised against it are left as they are.
    """
    new_status = changes.get('status')
    shop = agreement.shop

    if new_status == 'Active' and agreement.status != 'Active':
        if shop.status != 'Vacant' or _active_agreement_for_shop(shop.id, exclude_id=agreement.id):
            raise ConflictError(f"Shop {shop.shop_number} is not vacant")

    for key, value in changes.items():
        setattr(agreement, key, value)

    if new_status in CLOSED_STATUSES and shop.agreement_id in (agreement.id, None):
        shop.vacate()
    elif new_status == 'Active':
        shop.occupy(agreement.tenant_id, agreement.id)

    db.session.commit()
    log.info("Agreement %s updated: %s", agreement.id, sorted(changes))
    return agreement
