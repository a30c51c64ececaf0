"""
Integration tests for SettlementService and KhataService.

These tests create real database objects (in-memory SQLite) and call the
service methods, asserting on the resulting khata entries and balances.
"""
from datetime import date
from decimal import Decimal

import pytest

from extensions import db
from models.persons import Person
from models.transactions import Transaction
from services.exceptions import InUse, InvalidSettlement, NotFound, SettlementConflict, ValidationFailed
from services.khata_service import KhataService
from services.settlement_service import SettlementService


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def person(as_user):
    return KhataService.create_person('Ravi')


@pytest.fixture
def lend(person):
    return KhataService.create_entry(person.id, 'lend', Decimal('1000.00'), note='Trip money')


def _children(txn):
    return Transaction.query.filter_by(parent_id=txn.id).order_by(Transaction.id).all()


# ---------------------------------------------------------------------------
# settle
# ---------------------------------------------------------------------------

class TestSettle:
    def test_partial_settlement(self, lend):
        settlement = SettlementService.settle(lend, Decimal('400'), date(2024, 3, 1))

        assert lend.settled_amount == Decimal('400.00')
        assert lend.settled is False
        assert settlement.type == 'borrow'
        assert settlement.amount == Decimal('400.00')
        assert settlement.settled_amount == Decimal('400.00')
        assert settlement.settled is True
        assert settlement.parent_id == lend.id
        assert settlement.person_id == lend.person_id
        assert settlement.due_date == date(2024, 3, 1)
        assert settlement.note == f'Settlement for {lend.id}'

    def test_full_settlement_when_amount_omitted(self, lend):
        SettlementService.settle(lend, Decimal('400'))
        settlement = SettlementService.settle(lend)

        assert settlement.amount == Decimal('600.00')
        assert lend.settled_amount == Decimal('1000.00')
        assert lend.settled is True
        assert len(_children(lend)) == 2

    def test_borrow_settles_with_lend_entry(self, person):
        borrow = KhataService.create_entry(person.id, 'borrow', Decimal('250'))
        settlement = SettlementService.settle(borrow)
        assert settlement.type == 'lend'
        assert borrow.settled is True

    @pytest.mark.parametrize('amount', [Decimal('0'), Decimal('-5'), Decimal('1000.01')])
    def test_invalid_amount_writes_nothing(self, lend, amount):
        with pytest.raises(InvalidSettlement):
            SettlementService.settle(lend, amount)

        db.session.refresh(lend)
        assert lend.settled_amount == Decimal('0.00')
        assert _children(lend) == []

    def test_settled_entry_cannot_be_settled_again(self, lend):
        SettlementService.settle(lend)
        with pytest.raises(InvalidSettlement):
            SettlementService.settle(lend, Decimal('1'))

    def test_stale_read_raises_conflict_and_rolls_back(self, lend):
        # Another request settles 300 after this one read the entry
        Transaction.query.filter_by(id=lend.id).update(
            {'settled_amount': Decimal('300.00')}, synchronize_session=False
        )
        db.session.commit()
        stale = Transaction(id=lend.id, user_id=lend.user_id, person_id=lend.person_id,
                            type='lend', amount=Decimal('1000.00'), settled_amount=Decimal('0.00'))

        with pytest.raises(SettlementConflict):
            SettlementService.settle(stale, Decimal('800'))

        fresh = db.session.get(Transaction, lend.id)
        db.session.refresh(fresh)
        assert fresh.settled_amount == Decimal('300.00')
        assert _children(fresh) == []


# ---------------------------------------------------------------------------
# delete_entry / close_khata
# ---------------------------------------------------------------------------

class TestDeleteEntry:
    def test_deleting_settlement_reverses_parent(self, lend):
        first = SettlementService.settle(lend, Decimal('400'))
        SettlementService.settle(lend)
        assert lend.settled is True

        SettlementService.delete_entry(first)

        db.session.refresh(lend)
        assert lend.settled_amount == Decimal('600.00')
        assert lend.settled is False
        assert len(_children(lend)) == 1

    def test_deleting_settlement_keeps_parent_settled_when_still_covered(self, person):
        txn = KhataService.create_entry(person.id, 'lend', Decimal('100'))
        txn.settled_amount = Decimal('150.00')
        txn.settled = True
        db.session.commit()
        child = Transaction(user_id=txn.user_id, person_id=person.id, type='borrow',
                            amount=Decimal('20.00'), settled_amount=Decimal('20.00'),
                            settled=True, parent_id=txn.id)
        db.session.add(child)
        db.session.commit()

        SettlementService.delete_entry(child)

        db.session.refresh(txn)
        assert txn.settled_amount == Decimal('130.00')
        assert txn.settled is True

    def test_deleting_original_removes_settlements(self, lend):
        SettlementService.settle(lend, Decimal('100'))
        SettlementService.settle(lend, Decimal('100'))
        lend_id = lend.id

        deleted = SettlementService.delete_entry(lend)

        assert deleted == 3
        assert Transaction.query.filter_by(parent_id=lend_id).count() == 0
        assert db.session.get(Transaction, lend_id) is None

    def test_close_khata_keeps_person(self, person, lend):
        SettlementService.settle(lend, Decimal('100'))
        KhataService.create_entry(person.id, 'borrow', Decimal('50'))

        deleted = SettlementService.close_khata(person)

        assert deleted == 3
        assert Transaction.query.filter_by(person_id=person.id).count() == 0
        assert db.session.get(Person, person.id) is not None


# ---------------------------------------------------------------------------
# KhataService
# ---------------------------------------------------------------------------

class TestKhataService:
    def test_create_entry_rejects_unknown_type(self, person):
        with pytest.raises(ValidationFailed):
            KhataService.create_entry(person.id, 'gift', Decimal('10'))

    def test_create_entry_for_missing_person(self, as_user):
        with pytest.raises(NotFound):
            KhataService.create_entry(999, 'lend', Decimal('10'))

    def test_list_people_balances(self, person, lend):
        other = KhataService.create_person('Meena')
        KhataService.create_entry(other.id, 'borrow', Decimal('300'))
        SettlementService.settle(lend, Decimal('400'))

        people, summary = KhataService.list_people()

        by_name = {p['name']: p['net_balance'] for p in people}
        assert [p['name'] for p in people] == ['Meena', 'Ravi']
        assert by_name == {'Ravi': 600.0, 'Meena': -300.0}
        assert summary == {'owed': 600.0, 'owe': 300.0, 'net': 300.0}

    def test_delete_person_with_entries_refused(self, person, lend):
        with pytest.raises(InUse):
            KhataService.delete_person(person.id)

    def test_delete_person_without_entries(self, person):
        KhataService.delete_person(person.id)
        assert db.session.get(Person, person.id) is None

    def test_rename_person_validates_length(self, person):
        with pytest.raises(ValidationFailed):
            KhataService.rename_person(person.id, 'x' * 81)
        assert KhataService.rename_person(person.id, '  Ravi K ').name == 'Ravi K'
