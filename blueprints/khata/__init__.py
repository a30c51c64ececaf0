from flask import Blueprint
from flask_login import login_required

khata_bp = Blueprint('khata', __name__)

# Require authentication for all routes in this blueprint
@khata_bp.before_request
@login_required
def require_login():
    pass

from . import routes
