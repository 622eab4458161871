from dateutil.relativedelta import relativedelta

from . import db, iso, money, new_id, utcnow


# Penalties raised against an agreement and not yet settled
agreement_pending_penalties = db.Table('agreement_pending_penalties',
    db.Column('agreement_id', db.String(36), db.ForeignKey('agreements.id'), primary_key=True),
    db.Column('penalty_id', db.String(36), db.ForeignKey('rent_penalties.id'), primary_key=True),
)


class Agreement(db.Model):
    __tablename__ = 'agreements'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    shop_id = db.Column(db.String(36), db.ForeignKey('shops.id'), nullable=False)
    tenant_id = db.Column(db.String(36), db.ForeignKey('tenants.id'), nullable=False)

    # Terms
    agreement_date = db.Column(db.Date, nullable=False)
    duration = db.Column(db.Integer, nullable=False)  # months
    monthly_rent = db.Column(db.Numeric(12, 2), nullable=False)
    security_deposit = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    advance_rent = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    agreement_type = db.Column(db.String(20), nullable=False, default='Commercial')  # Residential, Commercial

    # Status
    status = db.Column(db.String(20), nullable=False, default='Active')  # Active, Expired, Terminated
    next_due_date = db.Column(db.Date, nullable=True)
    last_payment_date = db.Column(db.Date, nullable=True)
    active_loan_id = db.Column(db.String(36), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    shop = db.relationship('Shop', lazy=True)
    tenant = db.relationship('Tenant', back_populates='agreements', lazy=True)
    pending_penalties = db.relationship('RentPenalty', secondary=agreement_pending_penalties, lazy=True)

    def __repr__(self):
        return f'<Agreement {self.id}: shop={self.shop_id} {self.status}>'

    @property
    def has_active_loan(self):
        return self.active_loan_id is not None

    @property
    def end_date(self):
        return self.agreement_date + relativedelta(months=self.duration)

    def serialize(self):
        return {
            'id': self.id,
            'shop_id': self.shop_id,
            'tenant_id': self.tenant_id,
            'shop_number': self.shop.shop_number if self.shop else None,
            'tenant_name': self.tenant.name if self.tenant else None,
            'agreement_date': iso(self.agreement_date),
            'end_date': iso(self.end_date) if self.agreement_date and self.duration else None,
            'duration': self.duration,
            'monthly_rent': money(self.monthly_rent),
            'security_deposit': money(self.security_deposit),
            'advance_rent': money(self.advance_rent),
            'agreement_type': self.agreement_type,
            'status': self.status,
            'next_due_date': iso(self.next_due_date),
            'last_payment_date': iso(self.last_payment_date),
            'has_active_loan': self.has_active_loan,
            'active_loan_id': self.active_loan_id,
            'pending_penalties': sorted(p.id for p in self.pending_penalties),
            'created_at': iso(self.created_at),
            'updated_at': iso(self.updated_at),
        }
