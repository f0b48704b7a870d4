# univote/elections/voting.py

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from univote.database.models import Coalition, Election, ElectionStatus, Vote
from univote.errors import AlreadyVoted, ElectionEnded, ElectionNotActive, NotFound, ValidationError
from univote.extensions import db

logger = logging.getLogger(__name__)


def has_voted(election_id: int, voter_id: int) -> bool:
    return db.session.query(
        db.session.query(Vote.id).filter_by(election_id=election_id, voter_id=voter_id).exists()
    ).scalar()


def cast_vote(election_id: int, coalition_id: int, voter_id: int, now: datetime) -> Vote:
    """
    Record a single ballot for ``voter_id`` in an election.

    The checks run in a fixed order and each raises its own error: the
    election must exist, be ``active``, and not have reached its end time
    (the stored status can lag the clock between sweeps); the voter must not
    have voted; the coalition must belong to the election.

    The unique index on (election_id, voter_id) settles concurrent requests
    for the same voter: the losing insert fails in the database and is
    reported as ``AlreadyVoted``.
    """
    election = db.session.get(Election, election_id)
    if election is None:
        raise NotFound("Election not found")

    if election.status != ElectionStatus.ACTIVE.value:
        raise ElectionNotActive()

    if now >= election.end_date:
        raise ElectionEnded()

    if has_voted(election_id, voter_id):
        raise AlreadyVoted()

    coalition = db.session.get(Coalition, coalition_id)
    if coalition is None or coalition.election_id != election_id:
        raise ValidationError("Coalition does not belong to this election")

    vote = Vote(election_id=election_id, coalition_id=coalition_id, voter_id=voter_id, voted_at=now)
    db.session.add(vote)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        if has_voted(election_id, voter_id):
            logger.info("Concurrent duplicate vote rejected for voter %s in election %s", voter_id, election_id)
            raise AlreadyVoted() from None
        raise
    return vote
