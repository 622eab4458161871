from . import db, iso, money, new_id, utcnow


class Shop(db.Model):
    __tablename__ = 'shops'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    shop_number = db.Column(db.String(20), unique=True, nullable=False)
    size = db.Column(db.Numeric(10, 2), nullable=False)
    monthly_rent = db.Column(db.Numeric(12, 2), nullable=False)
    deposit = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default='Vacant')  # Vacant, Occupied, Maintenance
    description = db.Column(db.Text, nullable=True)

    # Back-references maintained by the agreement lifecycle
    tenant_id = db.Column(db.String(36), nullable=True)
    agreement_id = db.Column(db.String(36), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f'<Shop {self.shop_number}: {self.status}>'

    def occupy(self, tenant_id, agreement_id):
        self.status = 'Occupied'
        self.tenant_id = tenant_id
        self.agreement_id = agreement_id

    def vacate(self):
        self.status = 'Vacant'
        self.tenant_id = None
        self.agreement_id = None

    def serialize(self):
        return {
            'id': self.id,
            'shop_number': self.shop_number,
            'size': money(self.size),
            'monthly_rent': money(self.monthly_rent),
            'deposit': money(self.deposit),
            'status': self.status,
            'description': self.description,
            'tenant_id': self.tenant_id,
            'agreement_id': self.agreement_id,
            'created_at': iso(self.created_at),
            'updated_at': iso(self.updated_at),
        }
