from . import db


class ReceiptCounter(db.Model):
    """Last receipt number handed out per sequence (``donation``, ``rent``)."""
    __tablename__ = 'receipt_counters'

    kind = db.Column(db.String(20), primary_key=True)
    last_value = db.Column(db.Integer, nullable=False, default=0)

    def __repr__(self):
        return f'<ReceiptCounter {self.kind}={self.last_value}>'
