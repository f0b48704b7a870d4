# univote/routes/results.py

from flask import Blueprint

from univote.authentication.rbac import Permission, require_permission
from univote.elections.tally import get_results, list_results
from univote.routes.common import ok

results_bp = Blueprint('results', __name__)


@results_bp.route('', methods=['GET'])
@require_permission(Permission.VIEW_RESULTS)
def elections_with_results():
    return ok(elections=list_results())


@results_bp.route('/<int:election_id>', methods=['GET'])
@require_permission(Permission.VIEW_RESULTS)
def election_results(election_id):
    return ok(**get_results(election_id))
