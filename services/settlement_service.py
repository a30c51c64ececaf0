"""
Settlement Service
==================
Partial and full settlement of lend/borrow entries ("khata").

Bookkeeping
-----------
An original entry keeps a running ``settled_amount``.  Each settlement:

  * creates a settlement entry of the opposite type (lend <-> borrow) with
    ``amount = settled_amount = settle amount``, ``settled=True`` and
    ``parent_id`` pointing at the original;
  * advances the original's ``settled_amount`` and sets
    ``settled = settled_amount >= amount``.

Both writes happen in one database transaction.  The original row is updated
with a conditional UPDATE on the ``settled_amount`` value that was validated
against, so two concurrent settlements cannot both pass validation and
over-settle the entry; the loser gets SettlementConflict and nothing is
written.

Deleting a settlement entry reverses its amount on the parent; deleting an
original removes all of its settlement entries.
"""
from datetime import date
from decimal import Decimal
from flask import current_app
from extensions import db
from models.transactions import Transaction
from services.exceptions import InvalidSettlement, SettlementConflict
from utils.db_helpers import user_query, user_get

CENT = Decimal('0.01')


def _money(value):
    return Decimal(str(value)).quantize(CENT)


class SettlementService:
    """Settlement and deletion rules for khata entries."""

    @staticmethod
    def settle(transaction, amount=None, settlement_date=None):
        """
        Apply a settlement to *transaction*.

        Args:
            transaction:     the original lend/borrow Transaction.
            amount:          amount to settle; None settles the full remaining balance.
            settlement_date: date recorded on the settlement entry (default today).

        Returns:
            Transaction — the newly created settlement entry.

        Raises:
            InvalidSettlement:  amount <= 0 or greater than the remaining balance.
            SettlementConflict: the entry changed between validation and update.
        """
        if settlement_date is None:
            settlement_date = date.today()

        expected_settled = _money(transaction.settled_amount or 0)
        total = _money(transaction.amount)
        remaining = max(total - expected_settled, Decimal('0.00'))
        settle_amount = remaining if amount is None else _money(amount)

        if settle_amount <= 0 or settle_amount > remaining:
            current_app.logger.warning(
                f'Rejected settlement of {settle_amount} on transaction {transaction.id} '
                f'(remaining {remaining})'
            )
            raise InvalidSettlement('Invalid settlement amount')

        new_settled = expected_settled + settle_amount
        fully_settled = new_settled >= total

        try:
            updated = Transaction.query.filter(
                Transaction.id == transaction.id,
                Transaction.user_id == transaction.user_id,
                Transaction.settled_amount == expected_settled,
            ).update(
                {'settled_amount': new_settled, 'settled': fully_settled},
                synchronize_session=False,
            )
            if updated != 1:
                raise SettlementConflict()

            settlement = Transaction(
                user_id=transaction.user_id,
                person_id=transaction.person_id,
                type=Transaction.opposite_type(transaction.type),
                amount=settle_amount,
                settled_amount=settle_amount,
                settled=True,
                due_date=settlement_date,
                note=f'Settlement for {transaction.id}',
                parent_id=transaction.id,
            )
            db.session.add(settlement)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        # The bulk UPDATE bypassed the identity map
        db.session.refresh(transaction)

        current_app.logger.info(
            f'Settled {settle_amount} on transaction {transaction.id}: '
            f'{transaction.settled_amount}/{transaction.amount} settled={transaction.settled}'
        )
        return settlement

    @staticmethod
    def delete_entry(transaction):
        """
        Delete a khata entry and keep its parent consistent.

        Settlement entry: the parent's ``settled_amount`` drops by this entry's
        amount (never below zero) and ``settled`` is recomputed from it.
        Original entry: every settlement entry pointing at it is deleted too.

        Returns:
            int — number of rows deleted.
        """
        entry_id = transaction.id
        deleted = 0
        try:
            if transaction.parent_id is not None:
                parent = user_get(Transaction, transaction.parent_id)
                if parent is not None:
                    reduced = _money(parent.settled_amount or 0) - _money(transaction.amount)
                    parent.settled_amount = max(reduced, Decimal('0.00'))
                    parent.settled = parent.settled_amount >= _money(parent.amount)
            else:
                children = user_query(Transaction).filter_by(parent_id=transaction.id).all()
                for child in children:
                    db.session.delete(child)
                    deleted += 1
                db.session.flush()

            db.session.delete(transaction)
            deleted += 1
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f'Deleted khata entry {entry_id} ({deleted} row(s))')
        return deleted

    @staticmethod
    def close_khata(person):
        """Delete every entry recorded against *person*; the person is kept."""
        try:
            entries = user_query(Transaction).filter_by(person_id=person.id).all()
            # Settlement entries first so no row is left pointing at a deleted parent
            entries.sort(key=lambda t: t.parent_id is None)
            for entry in entries:
                db.session.delete(entry)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        current_app.logger.info(f'Closed khata for person {person.id}: {len(entries)} entries removed')
        return len(entries)

