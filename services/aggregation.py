"""
Numeric roll-ups shared by the dashboard, reports and khata views.
All functions work on already-fetched rows and return Decimals.
"""
from decimal import Decimal

ZERO = Decimal('0.00')


def to_decimal(value):
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def percentage(amount, total):
    """``amount / total * 100``, or 0 when total is not positive."""
    total = to_decimal(total)
    if total <= 0:
        return Decimal('0')
    return to_decimal(amount) / total * 100


def delta_percent(current, previous):
    """Month-on-month change in percent; 0 when there is nothing to compare with."""
    previous = to_decimal(previous)
    if previous == 0:
        return Decimal('0')
    return (to_decimal(current) - previous) / previous * 100


def category_breakdown(rows):
    """
    Percentage share per category.

    Args:
        rows: iterable of ``(type_id, name, total)``.

    Returns:
        list of dicts sorted by total, largest first.
    """
    rows = [(type_id, name, to_decimal(total)) for type_id, name, total in rows]
    grand_total = sum((total for _, _, total in rows), ZERO)
    data = [
        {
            'type_id': type_id,
            'category': name or 'Unknown',
            'total_amount': total,
            'percentage': percentage(total, grand_total),
        }
        for type_id, name, total in rows
    ]
    data.sort(key=lambda item: item['total_amount'], reverse=True)
    return data


def outstanding(txn):
    return max(to_decimal(txn.amount) - to_decimal(txn.settled_amount), ZERO)


def outstanding_totals(transactions):
    """Outstanding lend / borrow totals over unsettled entries."""
    totals = {'lend': ZERO, 'borrow': ZERO}
    for txn in transactions:
        if txn.settled or txn.type not in totals:
            continue
        totals[txn.type] += outstanding(txn)
    return totals


def person_balances(transactions):
    """
    Net balance per person (positive = they owe you) and overall summary.

    Returns:
        (balances: dict[person_id, Decimal], summary: dict owed/owe/net)
    """
    balances = {}
    owed = ZERO
    owe = ZERO
    for txn in transactions:
        if txn.settled or txn.type not in ('lend', 'borrow'):
            continue
        amount = to_decimal(txn.amount) - to_decimal(txn.settled_amount)
        if txn.type == 'lend':
            owed += amount
            signed = amount
        else:
            owe += amount
            signed = -amount
        balances[txn.person_id] = balances.get(txn.person_id, ZERO) + signed
    return balances, {'owed': owed, 'owe': owe, 'net': owed - owe}
