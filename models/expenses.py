from extensions import db
from datetime import datetime, timezone


class Expense(db.Model):
    __tablename__ = 'expenses'

    SOURCES = ('manual', 'emi', 'recurring')

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    type_id = db.Column(db.Integer, db.ForeignKey('expense_types.id'), nullable=False, index=True)

    amount = db.Column(db.Numeric(12, 2), nullable=False)
    date = db.Column(db.Date, nullable=False, index=True)
    note = db.Column(db.String(300))

    # Where the expense came from: typed in, or created by marking an EMI / bill as paid
    source = db.Column(db.String(20), nullable=False, default='manual')
    source_id = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))
    updated_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None),
                           onupdate=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    type = db.relationship('ExpenseType', back_populates='expenses')
    # No delete cascade: deleting an expense nulls expense_id on its marks
    paid_marks = db.relationship('PaidMark', back_populates='expense')

    def to_dict(self):
        return {
            'id': self.id,
            'amount': float(self.amount),
            'date': self.date.isoformat(),
            'type_id': self.type_id,
            'type': self.type.name if self.type else None,
            'note': self.note,
            'source': self.source,
            'source_id': self.source_id,
        }

    def __repr__(self):
        return f'<Expense {self.date}: {self.note} - {self.amount}>'
