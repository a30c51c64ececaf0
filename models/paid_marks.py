from extensions import db
from datetime import datetime, timezone


class PaidMark(db.Model):
    """Records that one monthly cycle of an EMI or recurring payment was paid.

    ``month`` is zero-based (0 = January) to match the cycle identifiers used by
    CycleService and the API.
    """
    __tablename__ = 'paid_marks'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'item_type', 'item_id', 'month', 'year',
                            name='uq_paid_mark_cycle'),
    )

    ITEM_TYPES = ('emi', 'recurring')

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    item_type = db.Column(db.String(20), nullable=False)
    item_id = db.Column(db.Integer, nullable=False)
    month = db.Column(db.Integer, nullable=False)  # 0-11
    year = db.Column(db.Integer, nullable=False)
    paid_date = db.Column(db.Date, nullable=False)
    note = db.Column(db.String(300))

    expense_id = db.Column(db.Integer, db.ForeignKey('expenses.id', ondelete='SET NULL'), nullable=True)
    emi_id = db.Column(db.Integer, db.ForeignKey('emis.id', ondelete='CASCADE'), nullable=True, index=True)
    recurring_id = db.Column(db.Integer, db.ForeignKey('recurring_payments.id', ondelete='CASCADE'),
                             nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    emi = db.relationship('EMI', back_populates='paid_marks')
    recurring = db.relationship('RecurringPayment', back_populates='paid_marks')
    expense = db.relationship('Expense', foreign_keys=[expense_id], back_populates='paid_marks')

    @property
    def cycle(self):
        return (self.year, self.month)

    def to_dict(self):
        return {
            'id': self.id,
            'item_type': self.item_type,
            'item_id': self.item_id,
            'month': self.month,
            'year': self.year,
            'paid_date': self.paid_date.isoformat(),
            'note': self.note,
            'expense_id': self.expense_id,
        }

    def __repr__(self):
        return f'<PaidMark {self.item_type}:{self.item_id} {self.year}-{self.month + 1:02d}>'
