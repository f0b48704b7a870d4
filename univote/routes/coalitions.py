# univote/routes/coalitions.py

from flask import Blueprint

from univote.authentication.rbac import Permission, admin_required, require_permission
from univote.elections import management
from univote.routes.common import json_body, ok

coalitions_bp = Blueprint('coalitions', __name__)


@coalitions_bp.route('/election/<int:election_id>', methods=['GET'])
@require_permission(Permission.VIEW_ELECTIONS)
def list_coalitions(election_id):
    coalitions = management.list_coalitions(election_id)
    return ok(coalitions=[c.to_dict() for c in coalitions])


@coalitions_bp.route('/<int:coalition_id>', methods=['GET'])
@require_permission(Permission.VIEW_ELECTIONS)
def get_coalition(coalition_id):
    return ok(coalition=management.get_coalition(coalition_id).to_dict())


@coalitions_bp.route('', methods=['POST'])
@admin_required
def create_coalition():
    coalition = management.create_coalition(json_body())
    return ok(201, message='Coalition created successfully', coalition=coalition.to_dict())


@coalitions_bp.route('/<int:coalition_id>', methods=['DELETE'])
@admin_required
def delete_coalition(coalition_id):
    management.delete_coalition(coalition_id)
    return ok(message='Coalition deleted successfully')
