from . import db, iso, money, new_id, utcnow

TRANSACTION_TYPES = ('Donation', 'Expense', 'Utilities', 'Salary', 'RentIncome')
EXPENSE_TYPES = ('Expense', 'Utilities', 'Salary')


class Transaction(db.Model):
    __tablename__ = 'transactions'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    date = db.Column(db.Date, nullable=False, index=True)
    type = db.Column(db.String(20), nullable=False, index=True)  # Donation, Expense, Utilities, Salary, RentIncome
    category = db.Column(db.String(100), nullable=False)
    sub_category = db.Column(db.String(100), nullable=True)
    description = db.Column(db.Text, nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    receipt_number = db.Column(db.String(40), unique=True, nullable=True)

    # Donation
    donor_name = db.Column(db.String(120), nullable=True)
    donor_contact = db.Column(db.String(10), nullable=True)
    family_members = db.Column(db.Integer, nullable=True)
    amount_per_person = db.Column(db.Numeric(12, 2), nullable=True)

    # Expense
    vendor = db.Column(db.String(120), nullable=True)
    payee_name = db.Column(db.String(120), nullable=True)
    payee_contact = db.Column(db.String(10), nullable=True)

    # Rent
    tenant_name = db.Column(db.String(120), nullable=True)
    tenant_contact = db.Column(db.String(10), nullable=True)
    agreement_id = db.Column(db.String(36), nullable=True, index=True)
    shop_number = db.Column(db.String(20), nullable=True)
    payment_method = db.Column(db.String(30), nullable=True)

    # Loan / penalty linkage
    loan_id = db.Column(db.String(36), nullable=True)
    emi_amount = db.Column(db.Numeric(12, 2), nullable=True)
    penalty_id = db.Column(db.String(36), nullable=True)
    penalty_amount = db.Column(db.Numeric(12, 2), nullable=True)

    idempotency_key = db.Column(db.String(100), unique=True, nullable=True)
    deleted_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f'<Transaction {self.type} {self.amount} on {self.date}>'

    @classmethod
    def live(cls):
        """Query over transactions that have not been soft deleted."""
        return cls.query.filter(cls.deleted_at.is_(None))

    def serialize(self):
        return {
            'id': self.id,
            'date': iso(self.date),
            'type': self.type,
            'category': self.category,
            'sub_category': self.sub_category,
            'description': self.description,
            'amount': money(self.amount),
            'receipt_number': self.receipt_number,
            'donor_name': self.donor_name,
            'donor_contact': self.donor_contact,
            'family_members': self.family_members,
            'amount_per_person': money(self.amount_per_person),
            'vendor': self.vendor,
            'payee_name': self.payee_name,
            'payee_contact': self.payee_contact,
            'tenant_name': self.tenant_name,
            'tenant_contact': self.tenant_contact,
            'agreement_id': self.agreement_id,
            'shop_number': self.shop_number,
            'payment_method': self.payment_method,
            'loan_id': self.loan_id,
            'emi_amount': money(self.emi_amount),
            'penalty_id': self.penalty_id,
            'penalty_amount': money(self.penalty_amount),
            'created_at': iso(self.created_at),
            'updated_at': iso(self.updated_at),
        }
