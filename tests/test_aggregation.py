"""
Tests for the aggregation helpers used by the dashboard, reports and khata.
"""
from decimal import Decimal
from types import SimpleNamespace

from services.aggregation import (
    category_breakdown, delta_percent, outstanding_totals, percentage, person_balances,
)


def _txn(person_id, type, amount, settled_amount='0', settled=False):
    return SimpleNamespace(person_id=person_id, type=type, amount=Decimal(amount),
                           settled_amount=Decimal(settled_amount), settled=settled)


class TestPercentages:
    def test_percentage(self):
        assert percentage(25, 200) == Decimal('12.5')

    def test_percentage_of_zero_total_is_zero(self):
        assert percentage(10, 0) == 0

    def test_delta_percent(self):
        assert delta_percent(150, 100) == Decimal('50')
        assert delta_percent(50, 100) == Decimal('-50')

    def test_delta_percent_without_previous_is_zero(self):
        assert delta_percent(150, 0) == 0


class TestCategoryBreakdown:
    def test_sorted_largest_first_with_shares(self):
        rows = [(1, 'Food', Decimal('100')), (2, 'Rent', Decimal('300'))]
        data = category_breakdown(rows)

        assert [item['category'] for item in data] == ['Rent', 'Food']
        assert data[0]['percentage'] == Decimal('75')
        assert data[1]['percentage'] == Decimal('25')

    def test_missing_name_reported_as_unknown(self):
        data = category_breakdown([(9, None, 5)])
        assert data[0]['category'] == 'Unknown'

    def test_empty(self):
        assert category_breakdown([]) == []


class TestKhataTotals:
    def test_outstanding_totals_skip_settled_rows(self):
        txns = [
            _txn(1, 'lend', '1000', '400'),
            _txn(1, 'lend', '500', '500', settled=True),
            _txn(2, 'borrow', '300'),
        ]
        assert outstanding_totals(txns) == {'lend': Decimal('600'), 'borrow': Decimal('300')}

    def test_person_balances_signed_per_person(self):
        txns = [
            _txn(1, 'lend', '1000', '400'),
            _txn(1, 'borrow', '100'),
            _txn(2, 'borrow', '300'),
        ]
        balances, summary = person_balances(txns)

        assert balances == {1: Decimal('500'), 2: Decimal('-300')}
        assert summary == {'owed': Decimal('600'), 'owe': Decimal('400'), 'net': Decimal('200')}
