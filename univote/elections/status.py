# univote/elections/status.py

import logging
from datetime import datetime
from typing import Dict

from univote.database.models import Election, ElectionStatus
from univote.extensions import db

logger = logging.getLogger(__name__)

UPCOMING = ElectionStatus.UPCOMING.value
ACTIVE = ElectionStatus.ACTIVE.value
CLOSED = ElectionStatus.CLOSED.value


def resolve_status(now: datetime, start_date: datetime, end_date: datetime, current_status: str) -> str:
    """
    Derive an election's status from the clock.

    ``closed`` is terminal and is returned unchanged whatever the dates say.
    Otherwise the election is ``closed`` once ``now`` reaches the end,
    ``active`` inside ``[start_date, end_date)`` and ``upcoming`` before it.
    """
    if current_status == CLOSED:
        return CLOSED
    if now >= end_date:
        return CLOSED
    if now >= start_date:
        return ACTIVE
    return UPCOMING


def reconcile_statuses(now: datetime) -> Dict[str, int]:
    """
    Persist the time-derived status of every election whose stored status
    disagrees with it. Closed elections are never touched.

    Returns how many elections were closed, activated and moved back to
    upcoming, plus the resulting per-status totals.
    """
    query = db.session.query(Election)

    closed = query.filter(
        Election.status != CLOSED,
        Election.end_date <= now,
    ).update({Election.status: CLOSED, Election.updated_at: now}, synchronize_session=False)

    activated = query.filter(
        Election.status == UPCOMING,
        Election.start_date <= now,
        Election.end_date > now,
    ).update({Election.status: ACTIVE, Election.updated_at: now}, synchronize_session=False)

    # An admin may have forced an election open before its start
    deactivated = query.filter(
        Election.status == ACTIVE,
        Election.start_date > now,
    ).update({Election.status: UPCOMING, Election.updated_at: now}, synchronize_session=False)

    db.session.commit()

    totals = dict(
        db.session.query(Election.status, db.func.count(Election.id)).group_by(Election.status).all()
    )
    summary = {
        "closed": closed,
        "activated": activated,
        "deactivated": deactivated,
        "total_active": totals.get(ACTIVE, 0),
        "total_upcoming": totals.get(UPCOMING, 0),
        "total_closed": totals.get(CLOSED, 0),
    }
    logger.info(
        "Election status sync: Active: %d, Upcoming: %d, Closed: %d (closed %d, activated %d, deactivated %d)",
        summary["total_active"], summary["total_upcoming"], summary["total_closed"],
        closed, activated, deactivated,
    )
    return summary
