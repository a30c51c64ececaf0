from extensions import db
from datetime import datetime, timezone


class Person(db.Model):
    """Counterparty of lend/borrow entries (one khata per person)"""
    __tablename__ = 'persons'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(80), nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    transactions = db.relationship('Transaction', back_populates='person', lazy='dynamic')

    def to_dict(self):
        return {'id': self.id, 'name': self.name}

    def __repr__(self):
        return f'<Person {self.name}>'
