"""
Integration tests for PaymentService, EmiService and RecurringService.
"""
from datetime import date
from decimal import Decimal

import pytest

from extensions import db
from models.expense_types import ExpenseType
from models.expenses import Expense
from models.paid_marks import PaidMark
from services.emi_service import EmiService
from services.exceptions import DuplicatePaymentMark, NotFound, ValidationFailed
from services.expense_service import ExpenseService
from services.payment_service import PaymentService
from services.recurring_service import RecurringService


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def emi(as_user):
    return EmiService.create_emi(
        name='Car loan',
        amount=Decimal('12500.00'),
        emi_type='car loan',
        due_day=31,
        start_date=date(2024, 1, 15),
        end_date=date(2024, 12, 15),
    )


@pytest.fixture
def rent(as_user):
    return RecurringService.create_recurring(name='Flat rent', type='Rent', amount=Decimal('18000'), due_day=5)


# ---------------------------------------------------------------------------
# EMI CRUD
# ---------------------------------------------------------------------------

class TestEmiService:
    def test_create_stores_canonical_type_and_total(self, emi):
        assert emi.emi_type == 'Car Loan'
        assert emi.total_emis == 12

    def test_unknown_emi_type_rejected(self, as_user):
        with pytest.raises(ValidationFailed):
            EmiService.create_emi('Gadget', Decimal('999'), 'Gadget Loan', 5,
                                  date(2024, 1, 1), date(2024, 6, 1))

    def test_update_recomputes_total(self, emi):
        updated = EmiService.update_emi(emi.id, 'Car loan', Decimal('12500'), 'Car Loan', 31,
                                        date(2024, 1, 15), date(2024, 6, 15))
        assert updated.total_emis == 6

    def test_describe_counts_paid_cycles(self, emi):
        PaymentService.mark_paid('emi', emi.id, 0, 2024, date(2024, 1, 30))
        PaymentService.mark_paid('emi', emi.id, 1, 2024, date(2024, 2, 28))

        data = EmiService.describe(emi, today=date(2024, 2, 26))

        assert data['paid_count'] == 2
        # February is paid, so March (due day 31) is next
        assert data['next_due_at'] == '2024-03-31'
        assert data['next_due_in_days'] == 34
        assert data['show_mark_paid'] is False
        assert len(data['paid_marks']) == 2

    def test_detail_schedule_grouped_newest_first(self, emi):
        detail = EmiService.get_emi_detail(emi.id, today=date(2024, 1, 1))
        keys = [group['cycle_key'] for group in detail['schedule']]

        assert keys[0] == '2024-12'
        assert keys[-1] == '2024-01'
        february = next(g for g in detail['schedule'] if g['cycle_key'] == '2024-02')
        assert february['entries'][0]['due_date'] == '2024-02-29'

    def test_delete_cascades_paid_marks(self, emi):
        PaymentService.mark_paid('emi', emi.id, 0, 2024, date(2024, 1, 30))
        EmiService.delete_emi(emi.id)

        assert PaidMark.query.count() == 0
        # The expense stays in the history
        assert Expense.query.count() == 1


# ---------------------------------------------------------------------------
# mark_paid
# ---------------------------------------------------------------------------

class TestMarkPaid:
    def test_creates_expense_and_mark(self, emi):
        mark, expense = PaymentService.mark_paid('emi', emi.id, 1, 2024, date(2024, 2, 27))

        assert expense.amount == Decimal('12500.00')
        assert expense.date == date(2024, 2, 27)
        assert expense.source == 'emi'
        assert expense.source_id == emi.id
        assert expense.note == 'EMI payment'
        assert mark.expense_id == expense.id
        assert mark.emi_id == emi.id
        assert mark.cycle == (2024, 1)

    def test_expense_type_falls_back_to_other(self, emi):
        # No expense type named "Car Loan" exists, so "Other" is used
        _, expense = PaymentService.mark_paid('emi', emi.id, 0, 2024, date(2024, 1, 31))
        assert expense.type.name == 'Other'

    def test_expense_type_matches_case_insensitively(self, rent):
        _, expense = PaymentService.mark_paid('recurring', rent.id, 4, 2024, date(2024, 5, 5), note='May rent')
        assert expense.type.name == 'Rent'
        assert expense.note == 'May rent'
        assert expense.source == 'recurring'

    def test_missing_other_type_is_created(self, rent):
        ExpenseType.query.filter(ExpenseType.name.in_(['Rent', 'Other'])).delete(synchronize_session=False)
        db.session.commit()

        _, expense = PaymentService.mark_paid('recurring', rent.id, 4, 2024, date(2024, 5, 5))

        assert expense.type.name == 'Other'
        assert expense.type.is_default is True
        assert expense.note == 'RECURRING payment'

    def test_duplicate_mark_rejected(self, emi):
        PaymentService.mark_paid('emi', emi.id, 0, 2024, date(2024, 1, 31))

        with pytest.raises(DuplicatePaymentMark):
            PaymentService.mark_paid('emi', emi.id, 0, 2024, date(2024, 2, 1))

        assert Expense.query.count() == 1

    def test_unique_cycle_constraint_rolls_back_expense(self, emi, monkeypatch):
        PaymentService.mark_paid('emi', emi.id, 0, 2024, date(2024, 1, 31))
        # A concurrent request that passed the lookup before the first commit
        monkeypatch.setattr(PaymentService, 'find_mark', staticmethod(lambda *args, **kwargs: None))

        with pytest.raises(DuplicatePaymentMark):
            PaymentService.mark_paid('emi', emi.id, 0, 2024, date(2024, 2, 1))

        assert Expense.query.count() == 1
        assert PaidMark.query.count() == 1

    def test_deleting_expense_unlinks_mark(self, rent):
        mark, expense = PaymentService.mark_paid('recurring', rent.id, 4, 2024, date(2024, 5, 5))
        mark_id = mark.id

        ExpenseService.delete_expense(expense.id)

        mark = db.session.get(PaidMark, mark_id)
        assert mark is not None
        assert mark.expense_id is None
        assert mark.to_dict()['expense_id'] is None

    def test_missing_plan_is_not_found(self, as_user):
        with pytest.raises(NotFound):
            PaymentService.mark_paid('emi', 4242, 0, 2024, date(2024, 1, 31))
        assert Expense.query.count() == 0

    def test_check_paid_and_list(self, emi, rent):
        PaymentService.mark_paid('emi', emi.id, 2, 2024, date(2024, 3, 30))
        PaymentService.mark_paid('recurring', rent.id, 2, 2024, date(2024, 3, 5))
        PaymentService.mark_paid('recurring', rent.id, 3, 2024, date(2024, 4, 5))

        paid, mark = PaymentService.check_paid('emi', emi.id, 2, 2024)
        assert paid is True and mark.item_id == emi.id
        assert PaymentService.check_paid('emi', emi.id, 3, 2024) == (False, None)
        assert len(PaymentService.list_marks(month=2, year=2024)) == 2
        assert len(PaymentService.list_marks(year=2024)) == 3


# ---------------------------------------------------------------------------
# Recurring payments
# ---------------------------------------------------------------------------

class TestRecurringService:
    def test_next_due_without_payments(self, rent):
        data = RecurringService.describe(rent, today=date(2024, 5, 2))
        assert data['next_due_at'] == '2024-05-05'
        assert data['next_due_in_days'] == 3
        assert data['show_mark_paid'] is True

    def test_next_due_follows_latest_mark(self, rent):
        PaymentService.mark_paid('recurring', rent.id, 4, 2024, date(2024, 5, 4))
        data = RecurringService.describe(rent, today=date(2024, 5, 10))
        assert data['next_due_at'] == '2024-06-05'

    def test_validation(self, as_user):
        with pytest.raises(ValidationFailed):
            RecurringService.create_recurring('Gym', 'Fitness', Decimal('0'), 5)
        with pytest.raises(ValidationFailed):
            RecurringService.create_recurring('Gym', 'Fitness', Decimal('10'), 32)
