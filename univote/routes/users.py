# univote/routes/users.py

from flask import Blueprint
from flask_jwt_extended import current_user

from univote.authentication import accounts
from univote.authentication.rbac import Permission, require_permission
from univote.routes.common import json_body, ok

users_bp = Blueprint('users', __name__)


@users_bp.route('/stats', methods=['GET'])
@require_permission(Permission.VIEW_STATS)
def stats():
    return ok(stats=accounts.system_stats())


@users_bp.route('/change-password', methods=['POST'])
@require_permission(Permission.CHANGE_PASSWORD)
def change_password():
    data = json_body()
    accounts.change_password(current_user, data.get('currentPassword'), data.get('newPassword'))
    return ok(message='Password changed successfully')
