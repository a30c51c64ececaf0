from decimal import Decimal
from datetime import datetime, timezone
from extensions import db


class Transaction(db.Model):
    """Lend/borrow entry in a person's khata.

    An original entry records money lent to or borrowed from a person.  Each
    settlement is stored as a second entry of the opposite type whose
    ``parent_id`` points back at the original; the original keeps the running
    ``settled_amount`` and flips ``settled`` once it reaches ``amount``.
    """
    __tablename__ = 'transactions'

    TYPES = ('lend', 'borrow')

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    person_id = db.Column(db.Integer, db.ForeignKey('persons.id'), nullable=False, index=True)
    type = db.Column(db.String(10), nullable=False)  # lend | borrow
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    settled_amount = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal('0.00'))
    settled = db.Column(db.Boolean, nullable=False, default=False)
    due_date = db.Column(db.Date, nullable=True)
    note = db.Column(db.String(300))

    # Set on settlement entries only
    parent_id = db.Column(db.Integer, db.ForeignKey('transactions.id'), nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))
    updated_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None),
                           onupdate=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    # Self-referential relationship: original -> settlement entries
    settlements = db.relationship('Transaction', backref=db.backref('parent', remote_side=[id]))
    person = db.relationship('Person', back_populates='transactions')

    @property
    def is_settlement(self):
        return self.parent_id is not None

    @property
    def remaining(self):
        """Outstanding balance, never negative."""
        return max(Decimal(str(self.amount)) - Decimal(str(self.settled_amount or 0)), Decimal('0.00'))

    @staticmethod
    def opposite_type(txn_type):
        return 'borrow' if txn_type == 'lend' else 'lend'

    def to_dict(self, include_settlements=False):
        data = {
            'id': self.id,
            'person_id': self.person_id,
            'person': self.person.name if self.person else None,
            'type': self.type,
            'amount': float(self.amount),
            'settled_amount': float(self.settled_amount or 0),
            'remaining': float(self.remaining),
            'settled': self.settled,
            'due_date': self.due_date.isoformat() if self.due_date else None,
            'note': self.note,
            'parent_id': self.parent_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_settlements:
            data['settlements'] = [s.to_dict() for s in self.settlements]
        return data

    def __repr__(self):
        return f'<Transaction {self.type} {self.amount} (settled {self.settled_amount})>'
