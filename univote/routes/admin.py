# univote/routes/admin.py

from flask import Blueprint

from univote.authentication import accounts
from univote.routes.common import json_body, ok

admin_bp = Blueprint('admin', __name__)


# Bootstrap the first administrator; needs SETUP_TOKEN in the environment
@admin_bp.route('/setup-admin', methods=['POST'])
def setup_admin():
    admin = accounts.setup_first_admin(json_body())
    return ok(201, message='Admin user created successfully', admin=admin.to_public_dict())


@admin_bp.route('/check-admin', methods=['GET'])
def check_admin():
    return ok(adminExists=accounts.admin_exists())
