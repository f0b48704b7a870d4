import pytest
from datetime import datetime, timedelta

from univote.database.models import Election
from univote.elections.status import ACTIVE, CLOSED, UPCOMING, reconcile_statuses, resolve_status
from univote.extensions import db

START = datetime(2026, 5, 1, 9, 0, 0)
END = datetime(2026, 5, 1, 17, 0, 0)


@pytest.mark.parametrize("now,current,expected", [
    (START - timedelta(minutes=1), UPCOMING, UPCOMING),
    (START, UPCOMING, ACTIVE),
    (START + timedelta(hours=3), UPCOMING, ACTIVE),
    (END - timedelta(seconds=1), ACTIVE, ACTIVE),
    (END, ACTIVE, CLOSED),
    (END + timedelta(days=2), ACTIVE, CLOSED),
    # never opened before the window passed
    (END + timedelta(minutes=5), UPCOMING, CLOSED),
    # admin forced it open too early
    (START - timedelta(hours=1), ACTIVE, UPCOMING),
])
def test_resolve_status_follows_the_window(now, current, expected):
    assert resolve_status(now, START, END, current) == expected


@pytest.mark.parametrize("offset_hours", [-48, -1, 0, 4, 8, 72])
def test_closed_is_terminal(offset_hours):
    now = START + timedelta(hours=offset_hours)
    assert resolve_status(now, START, END, CLOSED) == CLOSED


def test_closed_never_reopens_even_if_dates_move(ctx, seed, clock):
    election_id = seed.election(start=timedelta(hours=-1), end=timedelta(hours=5), status=CLOSED)

    reconcile_statuses(clock.now())

    assert db.session.get(Election, election_id).status == CLOSED


def test_reconcile_persists_transitions(ctx, seed, clock):
    upcoming = seed.election(start=timedelta(hours=1), end=timedelta(hours=3))
    active = seed.election(start=timedelta(hours=-1), end=timedelta(minutes=30))
    stale = seed.election(start=timedelta(hours=-3), end=timedelta(hours=-1), status=ACTIVE)

    clock.advance(hours=2)
    summary = reconcile_statuses(clock.now())

    assert db.session.get(Election, upcoming).status == ACTIVE
    assert db.session.get(Election, active).status == CLOSED
    assert db.session.get(Election, stale).status == CLOSED
    assert summary["activated"] == 1
    assert summary["closed"] == 2
    assert summary["deactivated"] == 0
    assert summary["total_active"] == 1
    assert summary["total_closed"] == 2


def test_reconcile_is_a_no_op_when_statuses_agree(ctx, seed, clock):
    seed.election(start=timedelta(hours=1), end=timedelta(hours=2))
    seed.election(start=timedelta(hours=-1), end=timedelta(hours=2))

    summary = reconcile_statuses(clock.now())

    assert (summary["closed"], summary["activated"], summary["deactivated"]) == (0, 0, 0)
    assert summary["total_upcoming"] == 1
    assert summary["total_active"] == 1


def test_admin_override_is_rederived_on_next_sweep(ctx, seed, clock):
    # Manually reopened after the end: the next sweep closes it again
    reopened = seed.election(start=timedelta(hours=-5), end=timedelta(hours=-1), status=ACTIVE)
    # Manually opened ahead of schedule: moved back to upcoming
    early = seed.election(start=timedelta(hours=2), end=timedelta(hours=4), status=ACTIVE)
    # Closed early by an admin: respected
    closed_early = seed.election(start=timedelta(hours=-1), end=timedelta(hours=4), status=CLOSED)

    summary = reconcile_statuses(clock.now())

    assert db.session.get(Election, reopened).status == CLOSED
    assert db.session.get(Election, early).status == UPCOMING
    assert db.session.get(Election, closed_early).status == CLOSED
    assert summary["deactivated"] == 1


def test_status_never_leaves_closed_across_many_sweeps(ctx, seed, clock):
    ids = [
        seed.election(start=timedelta(hours=h), end=timedelta(hours=h + 2))
        for h in (-3, -1, 1, 3)
    ]
    seen = {election_id: [] for election_id in ids}
    for _ in range(8):
        reconcile_statuses(clock.now())
        db.session.expire_all()
        for election_id in ids:
            seen[election_id].append(db.session.get(Election, election_id).status)
        clock.advance(hours=1)

    for history in seen.values():
        if CLOSED in history:
            first_closed = history.index(CLOSED)
            assert set(history[first_closed:]) == {CLOSED}
