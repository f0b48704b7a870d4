# univote/elections/tally.py

from typing import Any, Dict, List

from univote.database.models import Coalition, Election, ElectionStatus, Vote
from univote.errors import NotFound
from univote.extensions import db


def count_votes(election_id: int) -> int:
    return db.session.query(db.func.count(Vote.id)).filter(Vote.election_id == election_id).scalar()


def coalition_counts(election_id: int) -> List[Dict[str, Any]]:
    """
    Vote counts for every coalition of an election, zero-vote coalitions
    included. Highest count first; equal counts keep creation order.
    """
    vote_count = db.func.count(Vote.id).label('vote_count')
    rows = (
        db.session.query(Coalition.id, Coalition.name, Coalition.color, vote_count)
        .outerjoin(Vote, Vote.coalition_id == Coalition.id)
        .filter(Coalition.election_id == election_id)
        .group_by(Coalition.id, Coalition.name, Coalition.color)
        .order_by(vote_count.desc(), Coalition.id.asc())
        .all()
    )
    return [
        {'id': row.id, 'name': row.name, 'color': row.color, 'voteCount': int(row.vote_count)}
        for row in rows
    ]


def get_results(election_id: int) -> Dict[str, Any]:
    election = db.session.get(Election, election_id)
    if election is None:
        raise NotFound("Election not found")

    return {
        'totalVotes': count_votes(election_id),
        'results': coalition_counts(election_id),
        'election': election.to_dict(),
    }


def list_results() -> List[Dict[str, Any]]:
    """Elections that have opened, newest first, with their vote totals."""
    elections = (
        db.session.query(Election)
        .filter(Election.status.in_([ElectionStatus.ACTIVE.value, ElectionStatus.CLOSED.value]))
        .order_by(Election.created_at.desc(), Election.id.desc())
        .all()
    )
    totals = vote_totals([e.id for e in elections])
    return [dict(e.to_dict(), totalVotes=totals.get(e.id, 0)) for e in elections]


def vote_totals(election_ids) -> Dict[int, int]:
    if not election_ids:
        return {}
    rows = (
        db.session.query(Vote.election_id, db.func.count(Vote.id))
        .filter(Vote.election_id.in_(election_ids))
        .group_by(Vote.election_id)
        .all()
    )
    return {election_id: count for election_id, count in rows}
