"""
Cycle Service
=============
Monthly due-date arithmetic for EMIs (fixed-term installment plans) and
recurring payments (open-ended bills).

Cycles
------
A cycle is one month's occurrence of an obligation, identified by
``(year, month)`` where ``month`` is zero-based (0 = January), the same
convention PaidMark rows use.  The due date of a cycle is the plan's
``due_day`` clamped into that month, so a due day of 31 falls on the 28th/29th
in February and on the 30th in April.  Out-of-range due days are clamped, never
rejected.

Everything here is pure computation over plain values: no queries, no
session access, nothing cached between calls.

Primary entry points
--------------------
  cycle_date()          — due date of one (year, month) cycle
  installment_count()   — number of cycles between an EMI's start and end
  schedule_for()        — per-cycle descriptors with paid status
  next_due()            — first unpaid cycle from the current month onwards
  recurring_next_due()  — next due date for an open-ended recurring payment
  group_by_month()      — schedule grouped for the EMI detail view
"""
import calendar
from collections.abc import Mapping
from datetime import date, datetime
from dateutil.relativedelta import relativedelta


class CycleService:
    """Due-date and installment-cycle calculations."""

    @staticmethod
    def days_in_month(year, month):
        """Number of days in a zero-based *month*."""
        return calendar.monthrange(year, month + 1)[1]

    @staticmethod
    def cycle_date(year, month, due_day):
        """
        Due date of the cycle ``(year, month)``.

        ``due_day`` is clamped to ``[1, days_in_month]``:

            cycle_date(2024, 1, 31) -> 2024-02-29
            cycle_date(2023, 1, 31) -> 2023-02-28
        """
        last_day = CycleService.days_in_month(year, month)
        safe_day = min(max(due_day, 1), last_day)
        return date(year, month + 1, safe_day)

    @staticmethod
    def normalize_cycle(year, month):
        """Fold an out-of-range zero-based month into ``(year, 0..11)``."""
        return year + month // 12, month % 12

    @staticmethod
    def start_of_month(value):
        return _as_date(value).replace(day=1)

    @staticmethod
    def month_bounds(year, month):
        """First and last date of a zero-based *month*."""
        return (date(year, month + 1, 1),
                date(year, month + 1, CycleService.days_in_month(year, month)))

    @staticmethod
    def months_between(start, end):
        """Calendar months from *start* to *end* (negative if end is earlier)."""
        start = _as_date(start)
        end = _as_date(end)
        return (end.year - start.year) * 12 + (end.month - start.month)

    @staticmethod
    def installment_count(start_date, end_date):
        """Whole months spanned by [start, end], inclusive, minimum 1."""
        return max(CycleService.months_between(start_date, end_date) + 1, 1)

    @staticmethod
    def cycle_for_index(start_date, index):
        """``(year, month)`` of cycle number *index* counted from *start_date*."""
        start_date = _as_date(start_date)
        return CycleService.normalize_cycle(start_date.year, start_date.month - 1 + index)

    @staticmethod
    def paid_cycles_from_marks(marks):
        """
        Map ``(year, month) -> paid_date`` from PaidMark-like objects.

        If a cycle has more than one mark the most recent paid date wins.
        """
        paid = {}
        for mark in marks:
            key = (mark.year, mark.month)
            existing = paid.get(key)
            if existing is None or mark.paid_date > existing:
                paid[key] = mark.paid_date
        return paid

    @staticmethod
    def schedule_for(plan, paid_cycles=()):
        """
        Build the installment schedule for an EMI-like *plan*.

        Args:
            plan:        object with ``start_date``, ``end_date`` and ``due_day``.
            paid_cycles: set of ``(year, month)`` or mapping of
                         ``(year, month) -> paid_date``.

        Returns:
            list[dict] — one entry per cycle index, in order::

                {'cycle_index', 'year', 'month', 'due_date', 'paid', 'paid_date'}
        """
        paid_cycles = _as_mapping(paid_cycles)
        count = CycleService.installment_count(plan.start_date, plan.end_date)

        schedule = []
        for index in range(count):
            year, month = CycleService.cycle_for_index(plan.start_date, index)
            key = (year, month)
            schedule.append({
                'cycle_index': index,
                'year': year,
                'month': month,
                'due_date': CycleService.cycle_date(year, month, plan.due_day),
                'paid': key in paid_cycles,
                'paid_date': paid_cycles.get(key),
            })
        return schedule

    @staticmethod
    def current_cycle_index(start_date, today):
        """Index of the cycle for today's calendar month, floored at 0."""
        return max(
            CycleService.months_between(
                CycleService.start_of_month(start_date),
                CycleService.start_of_month(today),
            ),
            0,
        )

    @staticmethod
    def next_due(plan, paid_cycles, today=None):
        """
        Due date of the first unpaid cycle from the current month onwards.

        Scans cycle indices from the current month's index up to the last
        installment.  Unpaid cycles from earlier months are not considered.

        Returns:
            date, or None when every remaining cycle is paid or the plan has
            already ended.
        """
        today = _as_date(today or date.today())
        paid_cycles = _as_mapping(paid_cycles)
        count = CycleService.installment_count(plan.start_date, plan.end_date)

        for index in range(CycleService.current_cycle_index(plan.start_date, today), count):
            year, month = CycleService.cycle_for_index(plan.start_date, index)
            if (year, month) not in paid_cycles:
                return CycleService.cycle_date(year, month, plan.due_day)
        return None

    @staticmethod
    def days_until(due_date, today=None):
        """Whole days from the start of *today* to *due_date* (negative if past)."""
        if due_date is None:
            return None
        today = _as_date(today or date.today())
        return (_as_date(due_date) - today).days

    @staticmethod
    def show_mark_paid(days, window=7):
        """True iff a next due date exists and is due within ``window`` days."""
        return days is not None and 0 <= days <= window

    @staticmethod
    def recurring_next_due(due_day, latest_mark=None, today=None):
        """
        Next due date of an open-ended recurring payment.

        With a payment history the next due date is one month after the due
        date of the most recently paid cycle.  Without one it is this month's
        due date if that has not passed yet, otherwise next month's.
        """
        today = _as_date(today or date.today())
        if latest_mark is not None:
            paid_cycle_date = CycleService.cycle_date(latest_mark.year, latest_mark.month, due_day)
            return paid_cycle_date + relativedelta(months=1)

        this_month = CycleService.cycle_date(today.year, today.month - 1, due_day)
        if this_month >= today:
            return this_month
        year, month = CycleService.normalize_cycle(today.year, today.month)
        return CycleService.cycle_date(year, month, due_day)

    @staticmethod
    def latest_mark(marks):
        """Most recent mark by paid date (ties broken by cycle), or None."""
        marks = list(marks)
        if not marks:
            return None
        return max(marks, key=lambda m: (m.paid_date, m.year, m.month))

    @staticmethod
    def due_summary(next_due_at, today=None, window=7):
        """Fields the list views attach to each EMI / recurring payment."""
        days = CycleService.days_until(next_due_at, today)
        return {
            'next_due_at': next_due_at.isoformat() if next_due_at else None,
            'next_due_in_days': days,
            'show_mark_paid': CycleService.show_mark_paid(days, window),
        }

    @staticmethod
    def group_by_month(schedule):
        """
        Group schedule entries by ``(year, month)`` for display.

        Months are returned newest first; entries inside a month are ordered
        by due date, newest first.
        """
        groups = {}
        for entry in schedule:
            groups.setdefault((entry['year'], entry['month']), []).append(entry)

        grouped = []
        for (year, month) in sorted(groups, reverse=True):
            entries = sorted(groups[(year, month)], key=lambda e: e['due_date'], reverse=True)
            grouped.append({
                'cycle_key': f'{year:04d}-{month + 1:02d}',
                'year': year,
                'month': month,
                'entries': entries,
            })
        return grouped


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    return value


def _as_mapping(paid_cycles):
    if isinstance(paid_cycles, Mapping):
        return paid_cycles
    return dict.fromkeys(paid_cycles or ())
