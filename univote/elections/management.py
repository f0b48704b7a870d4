# univote/elections/management.py

from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError

from univote.database.models import (
    CANDIDATE_POSITIONS,
    DEFAULT_COALITION_COLOR,
    ELECTION_STATUSES,
    Candidate,
    Coalition,
    Election,
    ElectionStatus,
    User,
    Vote,
)
from univote.elections.status import resolve_status
from univote.elections.tally import vote_totals
from univote.errors import Conflict, NotFound, ValidationError
from univote.extensions import db
from univote.security.input_validator import validator

# Administration of elections, coalitions and candidates

START_DATE_GRACE = timedelta(days=1)


class ElectionError(ValidationError):
    pass


def get_election(election_id: int) -> Election:
    election = db.session.get(Election, election_id)
    if election is None:
        raise NotFound("Election not found")
    return election


def list_elections():
    elections = db.session.query(Election).order_by(Election.created_at.desc(), Election.id.desc()).all()
    totals = vote_totals([e.id for e in elections])
    return [
        dict(e.to_dict(include_creator=True), totalVotes=totals.get(e.id, 0))
        for e in elections
    ]


def list_active_elections():
    return (
        db.session.query(Election)
        .filter(Election.status == ElectionStatus.ACTIVE.value)
        .order_by(Election.start_date.desc())
        .all()
    )


def _check_dates(start: datetime, end: datetime):
    if end <= start:
        raise ElectionError("End date must be after start date")


def create_election(data, creator: User, now: datetime) -> Election:
    validator.require_fields(data, ['title', 'startDate', 'endDate'], "Title, start date, and end date are required")

    start = validator.parse_datetime(data['startDate'])
    end = validator.parse_datetime(data['endDate'])
    _check_dates(start, end)
    if start < now - START_DATE_GRACE:
        raise ElectionError("Start date cannot be more than 1 day in the past")

    election = Election(
        title=validator.sanitize_plain(data['title'], max_length=150),
        description=validator.sanitize_string(data.get('description') or '', max_length=5000),
        start_date=start,
        end_date=end,
        status=resolve_status(now, start, end, ElectionStatus.UPCOMING.value),
        created_by=creator.id,
    )
    db.session.add(election)
    db.session.commit()
    return election


def update_election(election_id: int, data) -> Election:
    """Edit title, description or dates. The status follows on the next sweep."""
    election = get_election(election_id)
    if not isinstance(data, dict):
        raise ValidationError("No changes provided")

    if 'title' in data:
        title = validator.sanitize_plain(data['title'] or '', max_length=150)
        if not title:
            raise ValidationError("Title cannot be empty")
        election.title = title
    if 'description' in data:
        election.description = validator.sanitize_string(data['description'] or '', max_length=5000)

    start = validator.parse_datetime(data['startDate']) if data.get('startDate') else election.start_date
    end = validator.parse_datetime(data['endDate']) if data.get('endDate') else election.end_date
    _check_dates(start, end)
    election.start_date = start
    election.end_date = end

    db.session.commit()
    return election


def set_election_status(election_id: int, status) -> Election:
    """
    Administrator override. Written as-is; unless it is ``closed`` the next
    status sweep re-derives it from the election dates.
    """
    if status not in ELECTION_STATUSES:
        raise ValidationError("Invalid status")
    election = get_election(election_id)
    election.status = status
    db.session.commit()
    return election


def delete_election(election_id: int):
    election = get_election(election_id)
    db.session.query(Vote).filter(Vote.election_id == election_id).delete(synchronize_session=False)
    db.session.query(Candidate).filter(Candidate.election_id == election_id).delete(synchronize_session=False)
    db.session.query(Coalition).filter(Coalition.election_id == election_id).delete(synchronize_session=False)
    db.session.delete(election)
    db.session.commit()


def get_coalition(coalition_id: int) -> Coalition:
    coalition = db.session.get(Coalition, coalition_id)
    if coalition is None:
        raise NotFound("Coalition not found")
    return coalition


def list_coalitions(election_id: int):
    return (
        db.session.query(Coalition)
        .filter(Coalition.election_id == election_id)
        .order_by(Coalition.created_at.asc(), Coalition.id.asc())
        .all()
    )


def create_coalition(data) -> Coalition:
    validator.require_fields(data, ['electionId', 'name'], "Election ID and name are required")
    election_id = validator.parse_id(data['electionId'], 'election ID')
    name = validator.sanitize_plain(data['name'], max_length=150)
    if not name:
        raise ValidationError("Election ID and name are required")

    color = data.get('color') or DEFAULT_COALITION_COLOR
    if not validator.validate_color(color):
        raise ValidationError("Color must be a hex value like #10b981")
    symbol = data.get('symbol')
    symbol = validator.sanitize_plain(symbol, max_length=100) if symbol else None

    get_election(election_id)

    duplicate = db.session.query(Coalition).filter_by(election_id=election_id, name=name).first()
    if duplicate is not None:
        raise Conflict("A coalition with this name already exists in this election")

    coalition = Coalition(election_id=election_id, name=name, symbol=symbol, color=color)
    db.session.add(coalition)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("A coalition with this name already exists in this election") from None
    return coalition


def delete_coalition(coalition_id: int):
    coalition = get_coalition(coalition_id)
    has_votes = db.session.query(
        db.session.query(Vote.id).filter(Vote.coalition_id == coalition_id).exists()
    ).scalar()
    if has_votes:
        raise Conflict("Cannot delete a coalition that has received votes")

    # Candidates stay in the election without a coalition
    db.session.query(Candidate).filter(Candidate.coalition_id == coalition_id).update(
        {Candidate.coalition_id: None}, synchronize_session=False
    )
    db.session.delete(coalition)
    db.session.commit()


def get_candidate(candidate_id: int) -> Candidate:
    candidate = db.session.get(Candidate, candidate_id)
    if candidate is None:
        raise NotFound("Candidate not found")
    return candidate


def create_candidate(data) -> Candidate:
    validator.require_fields(data, ['electionId', 'name', 'position'], "Election ID, name, and position are required")
    if data['position'] not in CANDIDATE_POSITIONS:
        raise ValidationError("Invalid position")

    election_id = validator.parse_id(data['electionId'], 'election ID')
    get_election(election_id)

    coalition_id = None
    if data.get('coalitionId'):
        coalition_id = validator.parse_id(data['coalitionId'], 'coalition ID')
        coalition = db.session.get(Coalition, coalition_id)
        if coalition is None or coalition.election_id != election_id:
            raise ValidationError("Coalition does not belong to this election")

    image_url = data.get('imageUrl') or None
    if image_url is not None and (not isinstance(image_url, str) or len(image_url) > 255):
        raise ValidationError("Invalid image URL")

    candidate = Candidate(
        election_id=election_id,
        coalition_id=coalition_id,
        name=validator.sanitize_plain(data['name'], max_length=100),
        position=data['position'],
        bio=validator.sanitize_string(data.get('bio') or '', max_length=5000),
        image_url=image_url,
    )
    db.session.add(candidate)
    db.session.commit()
    return candidate


def _position_order(candidate):
    return (CANDIDATE_POSITIONS.index(candidate.position), candidate.id)


def list_candidates(election_id: int):
    """Candidates of an election grouped under their coalitions, plus the unassigned ones."""
    coalitions = list_coalitions(election_id)
    candidates = db.session.query(Candidate).filter(Candidate.election_id == election_id).all()

    members = {coalition.id: [] for coalition in coalitions}
    unassigned = []
    for candidate in sorted(candidates, key=_position_order):
        if candidate.coalition_id in members:
            members[candidate.coalition_id].append(candidate.to_dict())
        else:
            unassigned.append(candidate.to_dict())

    grouped = [
        dict(coalition.to_dict(), members=members[coalition.id])
        for coalition in coalitions
    ]
    return grouped, unassigned


def delete_candidate(candidate_id: int):
    candidate = get_candidate(candidate_id)
    db.session.delete(candidate)
    db.session.commit()
