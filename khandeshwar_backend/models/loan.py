from . import db, iso, money, new_id, utcnow


class Loan(db.Model):
    __tablename__ = 'loans'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    tenant_id = db.Column(db.String(36), db.ForeignKey('tenants.id'), nullable=False)
    agreement_id = db.Column(db.String(36), db.ForeignKey('agreements.id'), nullable=False)
    tenant_name = db.Column(db.String(120), nullable=True)

    loan_amount = db.Column(db.Numeric(12, 2), nullable=False)
    interest_rate = db.Column(db.Numeric(6, 2), nullable=False)  # monthly, percent
    disbursed_date = db.Column(db.Date, nullable=False)
    loan_duration = db.Column(db.Integer, nullable=False)  # months
    monthly_emi = db.Column(db.Numeric(12, 2), nullable=False)

    outstanding_balance = db.Column(db.Numeric(12, 2), nullable=False)
    total_repaid = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default='Active')  # Active, Completed, Defaulted
    next_emi_date = db.Column(db.Date, nullable=True)
    last_payment_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    payments = db.relationship('LoanPayment', backref='loan', lazy=True,
                               order_by='LoanPayment.created_at', cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Loan {self.id}: {self.outstanding_balance} outstanding>'

    def serialize(self, include_payments=False):
        data = {
            'id': self.id,
            'tenant_id': self.tenant_id,
            'agreement_id': self.agreement_id,
            'tenant_name': self.tenant_name,
            'loan_amount': money(self.loan_amount),
            'interest_rate': money(self.interest_rate),
            'disbursed_date': iso(self.disbursed_date),
            'loan_duration': self.loan_duration,
            'monthly_emi': money(self.monthly_emi),
            'outstanding_balance': money(self.outstanding_balance),
            'total_repaid': money(self.total_repaid),
            'status': self.status,
            'next_emi_date': iso(self.next_emi_date),
            'last_payment_date': iso(self.last_payment_date),
            'created_at': iso(self.created_at),
            'updated_at': iso(self.updated_at),
        }
        if include_payments:
            data['payments'] = [p.serialize() for p in self.payments]
        return data


class LoanPayment(db.Model):
    __tablename__ = 'loan_payments'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    loan_id = db.Column(db.String(36), db.ForeignKey('loans.id'), nullable=False)
    payment_date = db.Column(db.Date, nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_type = db.Column(db.String(20), nullable=False, default='EMI')  # EMI, PartPayment, FullPayment
    transaction_id = db.Column(db.String(36), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow)

    def serialize(self):
        return {
            'id': self.id,
            'loan_id': self.loan_id,
            'payment_date': iso(self.payment_date),
            'amount': money(self.amount),
            'payment_type': self.payment_type,
            'transaction_id': self.transaction_id,
            'created_at': iso(self.created_at),
        }
