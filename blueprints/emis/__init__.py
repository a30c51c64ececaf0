from flask import Blueprint
from flask_login import login_required

emis_bp = Blueprint('emis', __name__)

# Require authentication for all routes in this blueprint
@emis_bp.before_request
@login_required
def require_login():
    pass

from . import routes
