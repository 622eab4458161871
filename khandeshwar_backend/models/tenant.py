from . import db, iso, new_id, utcnow


class Tenant(db.Model):
    __tablename__ = 'tenants'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(10), nullable=False)
    email = db.Column(db.String(120), nullable=True)
    address = db.Column(db.Text, nullable=False)
    business_type = db.Column(db.String(100), nullable=False)
    status = db.Column(db.String(20), nullable=False, default='Active')  # Active, Inactive
    id_proof = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    agreements = db.relationship('Agreement', back_populates='tenant', lazy=True)

    def __repr__(self):
        return f'<Tenant {self.name}>'

    @property
    def has_active_agreement(self):
        return any(a.status == 'Active' for a in self.agreements)

    def serialize(self):
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'email': self.email,
            'address': self.address,
            'business_type': self.business_type,
            'status': self.status,
            'id_proof': self.id_proof,
            'created_at': iso(self.created_at),
            'updated_at': iso(self.updated_at),
        }
