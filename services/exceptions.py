"""
Service-layer exceptions.

Services raise these; the API layer turns them into JSON error responses
using ``status_code`` (see app.register_error_handlers).
"""


class SmartExpenseError(Exception):
    """Base exception for all rejected operations."""
    status_code = 400

    def __init__(self, message=None):
        super().__init__(message or self.__doc__)
        self.message = message or self.__doc__


class ValidationFailed(SmartExpenseError):
    """Invalid input"""
    status_code = 400


class NotFound(SmartExpenseError):
    """Record not found"""
    status_code = 404


class InvalidSettlement(SmartExpenseError):
    """Invalid settlement amount"""
    status_code = 400


class SettlementConflict(SmartExpenseError):
    """Transaction was settled concurrently, please retry"""
    status_code = 409


class DuplicatePaymentMark(SmartExpenseError):
    """Already marked as paid for selected month"""
    status_code = 409


class DuplicateName(SmartExpenseError):
    """Name already exists"""
    status_code = 409


class InUse(SmartExpenseError):
    """Record is in use and cannot be deleted"""
    status_code = 400
