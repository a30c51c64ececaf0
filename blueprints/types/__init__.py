from flask import Blueprint
from flask_login import login_required

types_bp = Blueprint('types', __name__)

# Require authentication for all routes in this blueprint
@types_bp.before_request
@login_required
def require_login():
    pass

from . import routes
