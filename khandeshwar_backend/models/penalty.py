from . import db, iso, money, new_id, utcnow


class RentPenalty(db.Model):
    __tablename__ = 'rent_penalties'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    agreement_id = db.Column(db.String(36), db.ForeignKey('agreements.id'), nullable=False)
    tenant_name = db.Column(db.String(120), nullable=True)

    rent_amount = db.Column(db.Numeric(12, 2), nullable=False)
    due_date = db.Column(db.Date, nullable=False)
    penalty_rate = db.Column(db.Numeric(6, 2), nullable=False)  # percent
    penalty_amount = db.Column(db.Numeric(12, 2), nullable=False)

    status = db.Column(db.String(20), nullable=False, default='Pending')  # Pending, Paid
    penalty_paid = db.Column(db.Boolean, nullable=False, default=False)
    penalty_paid_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f'<RentPenalty {self.id}: {self.penalty_amount} {self.status}>'

    def serialize(self):
        return {
            'id': self.id,
            'agreement_id': self.agreement_id,
            'tenant_name': self.tenant_name,
            'rent_amount': money(self.rent_amount),
            'due_date': iso(self.due_date),
            'penalty_rate': money(self.penalty_rate),
            'penalty_amount': money(self.penalty_amount),
            'status': self.status,
            'penalty_paid': self.penalty_paid,
            'penalty_paid_date': iso(self.penalty_paid_date),
            'created_at': iso(self.created_at),
            'updated_at': iso(self.updated_at),
        }
