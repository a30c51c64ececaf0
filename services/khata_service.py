"""
Khata Service
=============
People and their lend/borrow ledgers.

A person's khata is every Transaction recorded against them.  Settlement
arithmetic lives in SettlementService; this module covers creating entries,
listing them and maintaining the people themselves.

Balances are signed from the user's point of view: money lent is positive
(the person owes you), money borrowed is negative.
"""
from flask import current_app
from extensions import db
from models.persons import Person
from models.transactions import Transaction
from services.aggregation import person_balances
from services.exceptions import InUse, ValidationFailed
from utils.db_helpers import user_query, user_get_or_404, set_user_id


class KhataService:
    """Lend/borrow entries and the people they are recorded against."""

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    @staticmethod
    def create_entry(person_id, txn_type, amount, due_date=None, note=None):
        """
        Record money lent to or borrowed from a person.

        Raises:
            ValidationFailed: unknown type or non-positive amount.
            NotFound:         the person does not belong to the current user.
        """
        if txn_type not in Transaction.TYPES:
            raise ValidationFailed('Type must be lend or borrow')
        if amount is None or amount <= 0:
            raise ValidationFailed('Amount must be positive')

        person = user_get_or_404(Person, person_id, 'Person')

        txn = set_user_id(Transaction(
            person_id=person.id,
            type=txn_type,
            amount=amount,
            due_date=due_date,
            note=note,
        ))
        try:
            db.session.add(txn)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f'Recorded {txn_type} of {amount} with person {person.id}')
        return txn

    @staticmethod
    def list_entries():
        """Every entry for the current user, newest first."""
        return user_query(Transaction).order_by(
            Transaction.created_at.desc(), Transaction.id.desc()
        ).all()

    @staticmethod
    def list_person_entries(person_id):
        """One person's khata, newest first."""
        person = user_get_or_404(Person, person_id, 'Person')
        entries = user_query(Transaction).filter_by(person_id=person.id).order_by(
            Transaction.created_at.desc(), Transaction.id.desc()
        ).all()
        return person, entries

    # ------------------------------------------------------------------
    # People
    # ------------------------------------------------------------------

    @staticmethod
    def create_person(name):
        name = KhataService._clean_name(name)
        person = set_user_id(Person(name=name))
        try:
            db.session.add(person)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return person

    @staticmethod
    def rename_person(person_id, name):
        person = user_get_or_404(Person, person_id, 'Person')
        person.name = KhataService._clean_name(name)
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return person

    @staticmethod
    def delete_person(person_id):
        """Delete a person with an empty khata; refused otherwise."""
        person = user_get_or_404(Person, person_id, 'Person')
        if user_query(Transaction).filter_by(person_id=person.id).count() > 0:
            raise InUse('Cannot delete person with transactions')
        try:
            db.session.delete(person)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        current_app.logger.info(f'Deleted person {person_id}')
        return person_id

    @staticmethod
    def list_people():
        """
        People ordered by name, each with their net balance.

        Returns:
            (list[dict], dict) — people and the ``owed/owe/net`` summary.
        """
        people = user_query(Person).order_by(Person.name.asc()).all()
        unsettled = user_query(Transaction).filter(
            Transaction.settled.is_(False),
            Transaction.type.in_(Transaction.TYPES),
        ).all()
        balances, summary = person_balances(unsettled)

        data = []
        for person in people:
            item = person.to_dict()
            item['net_balance'] = float(balances.get(person.id, 0))
            data.append(item)

        return data, {key: float(value) for key, value in summary.items()}

    @staticmethod
    def _clean_name(name):
        name = (name or '').strip()
        if not name or len(name) > 80:
            raise ValidationFailed('Name must be between 1 and 80 characters')
        return name
