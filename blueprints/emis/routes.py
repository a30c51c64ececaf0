from . import emis_bp
from .forms import EmiForm
from services.emi_service import EmiService
from utils.api import json_response


@emis_bp.route('/api/emis')
def index():
    """EMIs with paid marks and next-due information"""
    return json_response(EmiService.list_emis())


@emis_bp.route('/api/emis', methods=['POST'])
def create():
    form = EmiForm.from_json().validate_or_raise()
    emi = EmiService.create_emi(**form.values())
    return json_response(EmiService.describe(emi), 201)


@emis_bp.route('/api/emis/<int:emi_id>')
def detail(emi_id):
    """One EMI with its installment schedule grouped by month"""
    return json_response(EmiService.get_emi_detail(emi_id))


@emis_bp.route('/api/emis/<int:emi_id>', methods=['PUT'])
def update(emi_id):
    form = EmiForm.from_json().validate_or_raise()
    emi = EmiService.update_emi(emi_id, **form.values())
    return json_response(EmiService.describe(emi))


@emis_bp.route('/api/emis/<int:emi_id>', methods=['DELETE'])
def delete(emi_id):
    EmiService.delete_emi(emi_id)
    return json_response({'id': emi_id})
