# univote/routes/elections.py

from flask import Blueprint
from flask_jwt_extended import current_user

from univote.authentication.rbac import Permission, admin_required, require_permission
from univote.clock import current_clock
from univote.database.models import ElectionStatus
from univote.elections import management
from univote.routes.common import json_body, ok

elections_bp = Blueprint('elections', __name__)


@elections_bp.route('', methods=['GET'])
@require_permission(Permission.VIEW_ELECTIONS)
def list_elections():
    return ok(elections=management.list_elections())


@elections_bp.route('/active', methods=['GET'])
@require_permission(Permission.VIEW_ELECTIONS)
def list_active_elections():
    elections = management.list_active_elections()
    return ok(elections=[e.to_dict(include_creator=True) for e in elections])


@elections_bp.route('/<int:election_id>', methods=['GET'])
@require_permission(Permission.VIEW_ELECTIONS)
def get_election(election_id):
    election = management.get_election(election_id)
    return ok(election=election.to_dict(include_creator=True))


@elections_bp.route('', methods=['POST'])
@admin_required
def create_election():
    election = management.create_election(json_body(), current_user, current_clock().now())
    if election.status == ElectionStatus.ACTIVE.value:
        message = 'Election created and is now active'
    else:
        message = 'Election created successfully'
    return ok(201, message=message, election=election.to_dict())


@elections_bp.route('/<int:election_id>', methods=['PATCH'])
@admin_required
def update_election(election_id):
    election = management.update_election(election_id, json_body())
    return ok(message='Election updated', election=election.to_dict())


@elections_bp.route('/<int:election_id>/status', methods=['PATCH'])
@admin_required
def update_election_status(election_id):
    election = management.set_election_status(election_id, json_body().get('status'))
    return ok(message='Election status updated', election=election.to_dict())


@elections_bp.route('/<int:election_id>', methods=['DELETE'])
@admin_required
def delete_election(election_id):
    management.delete_election(election_id)
    return ok(message='Election deleted successfully')
