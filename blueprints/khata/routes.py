"""
Khata Routes
Lend/borrow entries, settlements and the people they are recorded against
"""
from . import khata_bp
from .forms import TransactionForm, SettlementForm, PersonForm
from models.persons import Person
from models.transactions import Transaction
from services.khata_service import KhataService
from services.settlement_service import SettlementService
from utils.api import json_response
from utils.db_helpers import user_get_or_404


# ── Entries ──────────────────────────────────────────────────────────────────

@khata_bp.route('/api/transactions')
def index():
    entries = KhataService.list_entries()
    return json_response([txn.to_dict(include_settlements=True) for txn in entries])


@khata_bp.route('/api/transactions', methods=['POST'])
def create():
    form = TransactionForm.from_json().validate_or_raise()
    txn = KhataService.create_entry(
        person_id=form.person_id.data,
        txn_type=form.type.data,
        amount=form.amount.data,
        due_date=form.due_date.data,
        note=form.note.data or None,
    )
    return json_response(txn.to_dict(), 201)


@khata_bp.route('/api/transactions/person/<int:person_id>')
def person_entries(person_id):
    person, entries = KhataService.list_person_entries(person_id)
    return json_response(
        [txn.to_dict(include_settlements=True) for txn in entries],
        person=person.to_dict(),
    )


@khata_bp.route('/api/transactions/<int:transaction_id>/settle', methods=['PUT'])
def settle(transaction_id):
    """Partial (amount given) or full settlement of one entry"""
    form = SettlementForm.from_json().validate_or_raise()
    original = user_get_or_404(Transaction, transaction_id, 'Transaction')
    settlement = SettlementService.settle(original, form.amount.data, form.date.data)
    return json_response({'settlement': settlement.to_dict(), 'transaction': original.to_dict()})


@khata_bp.route('/api/khata/entries/<int:entry_id>', methods=['DELETE'])
def delete_entry(entry_id):
    entry = user_get_or_404(Transaction, entry_id, 'Entry')
    SettlementService.delete_entry(entry)
    return json_response({'id': entry_id})


@khata_bp.route('/api/khata/<int:person_id>/close', methods=['DELETE'])
def close_khata(person_id):
    """Clear a person's khata history; the person is kept"""
    person = user_get_or_404(Person, person_id, 'Khata')
    deleted = SettlementService.close_khata(person)
    return json_response({'deleted_transactions': deleted})


# ── People ───────────────────────────────────────────────────────────────────

@khata_bp.route('/api/persons')
def persons():
    data, summary = KhataService.list_people()
    return json_response(data, summary=summary)


@khata_bp.route('/api/persons', methods=['POST'])
def create_person():
    form = PersonForm.from_json().validate_or_raise()
    person = KhataService.create_person(form.name.data)
    return json_response(person.to_dict(), 201)


@khata_bp.route('/api/persons/<int:person_id>', methods=['PATCH'])
def rename_person(person_id):
    form = PersonForm.from_json().validate_or_raise()
    person = KhataService.rename_person(person_id, form.name.data)
    return json_response(person.to_dict())


@khata_bp.route('/api/persons/<int:person_id>', methods=['DELETE'])
def delete_person(person_id):
    KhataService.delete_person(person_id)
    return json_response({'id': person_id})
