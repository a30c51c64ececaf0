"""
Tests for CycleService: due-date clamping, installment counts, schedules and
next-due calculations for EMIs and recurring payments.

Months are zero-based throughout (0 = January).
"""
from datetime import date
from types import SimpleNamespace

import pytest

from services.cycle_service import CycleService


def _plan(start, end, due_day):
    return SimpleNamespace(start_date=start, end_date=end, due_day=due_day)


def _mark(year, month, paid_date):
    return SimpleNamespace(year=year, month=month, paid_date=paid_date)


# ---------------------------------------------------------------------------
# cycle_date / clamping
# ---------------------------------------------------------------------------

class TestCycleDate:
    def test_due_day_31_clamped_in_leap_february(self):
        assert CycleService.cycle_date(2024, 1, 31) == date(2024, 2, 29)

    def test_due_day_31_clamped_in_common_february(self):
        assert CycleService.cycle_date(2023, 1, 31) == date(2023, 2, 28)

    def test_due_day_31_clamped_in_april(self):
        assert CycleService.cycle_date(2024, 3, 31) == date(2024, 4, 30)

    def test_due_day_in_range_is_unchanged(self):
        assert CycleService.cycle_date(2024, 0, 15) == date(2024, 1, 15)

    def test_due_day_below_one_is_clamped_to_first(self):
        assert CycleService.cycle_date(2024, 5, 0) == date(2024, 6, 1)

    def test_month_bounds(self):
        assert CycleService.month_bounds(2024, 1) == (date(2024, 2, 1), date(2024, 2, 29))


# ---------------------------------------------------------------------------
# installment_count / cycle_for_index
# ---------------------------------------------------------------------------

class TestInstallmentCount:
    def test_twelve_months_inclusive(self):
        assert CycleService.installment_count(date(2024, 1, 1), date(2024, 12, 1)) == 12

    def test_same_month_is_one(self):
        assert CycleService.installment_count(date(2024, 3, 1), date(2024, 3, 31)) == 1

    def test_end_before_start_yields_one(self):
        assert CycleService.installment_count(date(2024, 6, 1), date(2024, 1, 1)) == 1

    def test_calendar_months_ignore_day_of_month(self):
        # 31 Jan -> 1 Mar spans three calendar months
        assert CycleService.installment_count(date(2024, 1, 31), date(2024, 3, 1)) == 3

    def test_cycle_for_index_rolls_into_next_year(self):
        assert CycleService.cycle_for_index(date(2024, 11, 5), 2) == (2025, 0)


# ---------------------------------------------------------------------------
# schedule_for
# ---------------------------------------------------------------------------

class TestSchedule:
    def test_schedule_marks_paid_cycles(self):
        plan = _plan(date(2024, 1, 10), date(2024, 4, 10), 10)
        paid = {(2024, 1): date(2024, 2, 9)}

        schedule = CycleService.schedule_for(plan, paid)

        assert [entry['cycle_index'] for entry in schedule] == [0, 1, 2, 3]
        assert [entry['paid'] for entry in schedule] == [False, True, False, False]
        assert schedule[1]['paid_date'] == date(2024, 2, 9)
        assert schedule[0]['paid_date'] is None

    def test_schedule_is_restartable(self):
        plan = _plan(date(2024, 1, 10), date(2024, 3, 10), 10)
        first = CycleService.schedule_for(plan, {})
        second = CycleService.schedule_for(plan, {})
        assert first == second

    def test_schedule_clamps_each_month(self):
        plan = _plan(date(2024, 1, 31), date(2024, 4, 30), 31)
        due_dates = [entry['due_date'] for entry in CycleService.schedule_for(plan)]
        assert due_dates == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]

    def test_latest_paid_date_wins(self):
        marks = [_mark(2024, 0, date(2024, 1, 5)), _mark(2024, 0, date(2024, 1, 20))]
        assert CycleService.paid_cycles_from_marks(marks) == {(2024, 0): date(2024, 1, 20)}


# ---------------------------------------------------------------------------
# next_due / mark-paid window
# ---------------------------------------------------------------------------

class TestNextDue:
    def test_first_unpaid_cycle_from_current_month(self):
        plan = _plan(date(2024, 1, 5), date(2024, 12, 5), 5)
        today = date(2024, 3, 1)
        # March paid, so April is next
        assert CycleService.next_due(plan, {(2024, 2)}, today) == date(2024, 4, 5)

    def test_earlier_unpaid_cycles_are_ignored(self):
        plan = _plan(date(2024, 1, 5), date(2024, 12, 5), 5)
        today = date(2024, 3, 1)
        assert CycleService.next_due(plan, set(), today) == date(2024, 3, 5)

    def test_all_paid_returns_none(self):
        plan = _plan(date(2024, 1, 5), date(2024, 2, 5), 5)
        assert CycleService.next_due(plan, {(2024, 0), (2024, 1)}, date(2024, 1, 2)) is None

    def test_plan_already_ended_returns_none(self):
        plan = _plan(date(2023, 1, 5), date(2023, 6, 5), 5)
        assert CycleService.next_due(plan, set(), date(2024, 1, 1)) is None

    def test_plan_not_started_uses_first_cycle(self):
        plan = _plan(date(2024, 6, 15), date(2024, 8, 15), 15)
        assert CycleService.next_due(plan, set(), date(2024, 1, 1)) == date(2024, 6, 15)

    @pytest.mark.parametrize('days, expected', [
        (None, False), (-1, False), (0, True), (7, True), (8, False),
    ])
    def test_show_mark_paid_window(self, days, expected):
        assert CycleService.show_mark_paid(days) is expected

    def test_due_summary(self):
        summary = CycleService.due_summary(date(2024, 3, 5), date(2024, 3, 1))
        assert summary == {'next_due_at': '2024-03-05', 'next_due_in_days': 4, 'show_mark_paid': True}

    def test_due_summary_without_next_due(self):
        summary = CycleService.due_summary(None, date(2024, 3, 1))
        assert summary == {'next_due_at': None, 'next_due_in_days': None, 'show_mark_paid': False}


# ---------------------------------------------------------------------------
# recurring_next_due
# ---------------------------------------------------------------------------

class TestRecurringNextDue:
    def test_never_paid_due_later_this_month(self):
        assert CycleService.recurring_next_due(20, None, date(2024, 5, 10)) == date(2024, 5, 20)

    def test_never_paid_due_today_counts_as_this_month(self):
        assert CycleService.recurring_next_due(10, None, date(2024, 5, 10)) == date(2024, 5, 10)

    def test_never_paid_already_passed_moves_to_next_month(self):
        assert CycleService.recurring_next_due(5, None, date(2024, 5, 10)) == date(2024, 6, 5)

    def test_never_paid_december_rolls_into_january(self):
        assert CycleService.recurring_next_due(5, None, date(2024, 12, 10)) == date(2025, 1, 5)

    def test_paid_cycle_plus_one_month(self):
        mark = _mark(2024, 4, date(2024, 5, 3))
        assert CycleService.recurring_next_due(5, mark, date(2024, 5, 10)) == date(2024, 6, 5)

    def test_paid_clamped_cycle_keeps_clamped_day(self):
        # Feb 29 + 1 month stays on the 29th
        mark = _mark(2024, 1, date(2024, 2, 28))
        assert CycleService.recurring_next_due(31, mark, date(2024, 3, 1)) == date(2024, 3, 29)

    def test_latest_mark_by_paid_date(self):
        older = _mark(2024, 3, date(2024, 4, 2))
        newer = _mark(2024, 4, date(2024, 5, 2))
        assert CycleService.latest_mark([newer, older]) is newer
        assert CycleService.latest_mark([]) is None


# ---------------------------------------------------------------------------
# group_by_month
# ---------------------------------------------------------------------------

class TestGroupByMonth:
    def test_months_newest_first(self):
        plan = _plan(date(2023, 11, 1), date(2024, 1, 1), 1)
        groups = CycleService.group_by_month(CycleService.schedule_for(plan))

        assert [group['cycle_key'] for group in groups] == ['2024-01', '2023-12', '2023-11']
        assert all(len(group['entries']) == 1 for group in groups)

    def test_entries_sorted_by_due_date_descending(self):
        schedule = [
            {'year': 2024, 'month': 0, 'due_date': date(2024, 1, 5)},
            {'year': 2024, 'month': 0, 'due_date': date(2024, 1, 25)},
        ]
        group = CycleService.group_by_month(schedule)[0]
        assert [entry['due_date'] for entry in group['entries']] == [date(2024, 1, 25), date(2024, 1, 5)]
