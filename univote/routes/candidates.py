# univote/routes/candidates.py

from flask import Blueprint

from univote.authentication.rbac import Permission, admin_required, require_permission
from univote.elections import management
from univote.routes.common import json_body, ok

candidates_bp = Blueprint('candidates', __name__)


@candidates_bp.route('/election/<int:election_id>', methods=['GET'])
@require_permission(Permission.VIEW_ELECTIONS)
def list_candidates(election_id):
    coalitions, unassigned = management.list_candidates(election_id)
    return ok(coalitions=coalitions, unassigned=unassigned)


@candidates_bp.route('/<int:candidate_id>', methods=['GET'])
@require_permission(Permission.VIEW_ELECTIONS)
def get_candidate(candidate_id):
    candidate = management.get_candidate(candidate_id)
    return ok(candidate=candidate.to_dict(include_coalition=True))


@candidates_bp.route('', methods=['POST'])
@admin_required
def create_candidate():
    candidate = management.create_candidate(json_body())
    return ok(201, message='Candidate added successfully', candidate=candidate.to_dict())


@candidates_bp.route('/<int:candidate_id>', methods=['DELETE'])
@admin_required
def delete_candidate(candidate_id):
    management.delete_candidate(candidate_id)
    return ok(message='Candidate removed successfully')
