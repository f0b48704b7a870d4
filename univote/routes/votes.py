# univote/routes/votes.py

from flask import Blueprint, current_app
from flask_jwt_extended import current_user

from univote.authentication.rbac import Permission, require_permission
from univote.clock import current_clock
from univote.elections.voting import cast_vote, has_voted
from univote.errors import ValidationError
from univote.extensions import limiter
from univote.routes.common import json_body, ok
from univote.security.input_validator import validator

votes_bp = Blueprint('votes', __name__)


@votes_bp.route('', methods=['POST'])
@limiter.limit(
    lambda: current_app.config['VOTE_RATE_LIMIT'],
    error_message='Too many vote attempts. Please wait before voting again.',
)
@require_permission(Permission.VOTE)
def vote():
    data = json_body()
    if not data.get('electionId') or not data.get('coalitionId'):
        raise ValidationError('Election ID and coalition ID are required')

    election_id = validator.parse_id(data['electionId'], 'election ID')
    coalition_id = validator.parse_id(data['coalitionId'], 'coalition ID')
    cast_vote(election_id, coalition_id, current_user.id, current_clock().now())
    return ok(201, message='Vote recorded successfully')


@votes_bp.route('/check/<int:election_id>', methods=['GET'])
@require_permission(Permission.VOTE)
def check_vote(election_id):
    return ok(hasVoted=has_voted(election_id, current_user.id))
