from extensions import db
from datetime import datetime, timezone


class ExpenseType(db.Model):
    """User-defined expense category (Food, Rent, ...)"""
    __tablename__ = 'expense_types'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(60), nullable=False)
    icon = db.Column(db.String(50))
    is_default = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    expenses = db.relationship('Expense', back_populates='type', lazy='dynamic')
    budget = db.relationship('CategoryBudget', back_populates='type', uselist=False,
                             cascade='all, delete-orphan')

    def to_dict(self, expense_count=None):
        data = {
            'id': self.id,
            'name': self.name,
            'icon': self.icon,
            'is_default': self.is_default,
        }
        if expense_count is not None:
            data['expense_count'] = expense_count
        return data

    def __repr__(self):
        return f'<ExpenseType {self.name}>'


class EmiType(db.Model):
    """Loan category an EMI can be filed under (Home Loan, Car Loan, ...)

    EMIs reference their type by name, so renaming a type has to rename it on
    every EMI as well (see TypeService.update_emi_type).
    """
    __tablename__ = 'emi_types'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(60), nullable=False)
    is_default = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    def to_dict(self, emi_count=None):
        data = {
            'id': self.id,
            'name': self.name,
            'is_default': self.is_default,
        }
        if emi_count is not None:
            data['emi_count'] = emi_count
        return data

    def __repr__(self):
        return f'<EmiType {self.name}>'
