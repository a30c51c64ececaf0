from extensions import db
from datetime import datetime, timezone


class CategoryBudget(db.Model):
    """Monthly spending limit for one expense type"""
    __tablename__ = 'category_budgets'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    type_id = db.Column(db.Integer, db.ForeignKey('expense_types.id'), nullable=False, unique=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))
    updated_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None),
                           onupdate=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    type = db.relationship('ExpenseType', back_populates='budget')

    def to_dict(self):
        return {
            'id': self.id,
            'type_id': self.type_id,
            'type': self.type.name if self.type else None,
            'amount': float(self.amount),
        }

    def __repr__(self):
        return f'<CategoryBudget {self.id}: {self.amount}>'
