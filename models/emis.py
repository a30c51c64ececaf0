from extensions import db
from datetime import datetime, timezone


class EMI(db.Model):
    """Fixed monthly installment with a start date, end date and due day"""
    __tablename__ = 'emis'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)  # Car loan, Phone on EMI, etc.
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    emi_type = db.Column(db.String(60), nullable=False)  # EmiType.name
    due_day = db.Column(db.Integer, nullable=False)  # 1-31, clamped to short months
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    total_emis = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))
    updated_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None),
                           onupdate=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    paid_marks = db.relationship('PaidMark', back_populates='emi', lazy=True,
                                 cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'amount': float(self.amount),
            'emi_type': self.emi_type,
            'due_day': self.due_day,
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'total_emis': self.total_emis,
        }

    def __repr__(self):
        return f'<EMI {self.name}: {self.amount} x {self.total_emis}>'
