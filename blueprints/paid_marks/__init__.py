from flask import Blueprint
from flask_login import login_required

paid_marks_bp = Blueprint('paid_marks', __name__)

# Require authentication for all routes in this blueprint
@paid_marks_bp.before_request
@login_required
def require_login():
    pass

from . import routes
