from flask import Blueprint
from flask_login import login_required

recurring_bp = Blueprint('recurring', __name__)

# Require authentication for all routes in this blueprint
@recurring_bp.before_request
@login_required
def require_login():
    pass

from . import routes
