from extensions import db
from datetime import datetime, timezone


class RecurringPayment(db.Model):
    """Open-ended monthly bill (rent, subscriptions, ...)"""
    __tablename__ = 'recurring_payments'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    type = db.Column(db.String(60), nullable=False)  # Matched against ExpenseType.name when paid
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    due_day = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))
    updated_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None),
                           onupdate=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    paid_marks = db.relationship('PaidMark', back_populates='recurring', lazy=True,
                                 cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'amount': float(self.amount),
            'due_day': self.due_day,
        }

    def __repr__(self):
        return f'<RecurringPayment {self.name}: {self.amount}>'
