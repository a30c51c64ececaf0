# Models package - Import all models for Flask-SQLAlchemy

from models.budgets import CategoryBudget
from models.emis import EMI
from models.expense_types import ExpenseType, EmiType
from models.expenses import Expense
from models.paid_marks import PaidMark
from models.persons import Person
from models.recurring import RecurringPayment
from models.transactions import Transaction
from models.users import User

__all__ = [
    'CategoryBudget',
    'EMI',
    'EmiType',
    'Expense',
    'ExpenseType',
    'PaidMark',
    'Person',
    'RecurringPayment',
    'Transaction',
    'User',
]
