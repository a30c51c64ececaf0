"""
Database query helpers for per-user data scoping.

Every row in this application belongs to a User.  Every query against a data
model should go through these helpers so that one user can never see another
user's records.

Usage
-----
In any blueprint route or service function::

    from utils.db_helpers import user_query, user_get_or_404, get_user_id

    # List all EMIs belonging to the current user
    emis = user_query(EMI).order_by(EMI.created_at.desc()).all()

    # Fetch a single record safely (raises NotFound if missing *or* not ours)
    emi = user_get_or_404(EMI, emi_id)

    # Supply user_id when creating a new record
    person = Person(name='Ravi', user_id=get_user_id())
"""

from flask_login import current_user


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------

def get_user_id():
    """Return ``current_user.id``, or ``None`` if not authenticated."""
    if current_user and current_user.is_authenticated:
        return current_user.id
    return None


def user_query(model):
    """Return a SQLAlchemy query pre-filtered to the current user.

    Examples::

        user_query(Expense).all()
        user_query(Transaction).filter_by(settled=False).all()
    """
    if not hasattr(model, 'user_id'):
        raise AttributeError(
            f"user_query() called on {model.__name__} but it has no user_id column."
        )
    uid = get_user_id()
    if uid is None:
        # Return a query that always yields zero rows rather than leaking data
        return model.query.filter(model.id == -1)
    return model.query.filter_by(user_id=uid)


def user_get(model, record_id):
    """Fetch a single record by *record_id*, scoped to the current user.

    Returns ``None`` if the record does not exist or belongs to another user.
    """
    uid = get_user_id()
    if uid is None or record_id is None:
        return None
    return model.query.filter_by(id=record_id, user_id=uid).first()


def user_get_or_404(model, record_id, label=None):
    """Like ``user_get`` but raises ``NotFound`` if nothing is found."""
    from services.exceptions import NotFound

    record = user_get(model, record_id)
    if record is None:
        raise NotFound(f'{label or model.__name__} not found')
    return record


def set_user_id(obj):
    """Set ``obj.user_id = get_user_id()`` in-place and return *obj*."""
    obj.user_id = get_user_id()
    return obj
