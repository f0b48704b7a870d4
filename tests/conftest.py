import pytest
from datetime import datetime, timedelta

from univote import create_app
from univote.authentication.rbac import UserRole
from univote.database.models import Candidate, Coalition, Election, User
from univote.elections.status import resolve_status
from univote.extensions import db
from univote.security.token_manager import token_manager


class FrozenClock:
    """Controllable stand-in for the system clock."""
    def __init__(self, start):
        self._now = start

    def now(self):
        return self._now

    def advance(self, **kwargs):
        self._now += timedelta(**kwargs)

    def set(self, value):
        self._now = value


class Seed:
    """Creates rows directly, each in its own app context, and hands back ids."""
    def __init__(self, app, clock):
        self.app = app
        self.clock = clock
        self._counter = 0

    def _next(self):
        self._counter += 1
        return self._counter

    def user(self, role=UserRole.VOTER.value, email=None, password="secret123", year=2):
        n = self._next()
        with self.app.app_context():
            hasher = self.app.extensions['univote_password_hasher']
            user = User(
                name=f"User {n}",
                email=email or f"user{n}@university.edu",
                password_hash=hasher.hash_password(password),
                registration_number=f"REG{n:05d}",
                year=year,
                role=role,
            )
            db.session.add(user)
            db.session.commit()
            return user.id

    def admin(self, **kwargs):
        return self.user(role=UserRole.ADMIN.value, **kwargs)

    def token(self, user_id):
        with self.app.app_context():
            return token_manager.generate_token(db.session.get(User, user_id))

    def headers(self, user_id):
        return {"Authorization": f"Bearer {self.token(user_id)}"}

    def election(self, start=timedelta(hours=-1), end=timedelta(hours=1), status=None, creator_id=None):
        now = self.clock.now()
        start_date, end_date = now + start, now + end
        if creator_id is None:
            creator_id = self.admin()
        with self.app.app_context():
            election = Election(
                title=f"Student Council {self._next()}",
                description="Annual vote",
                start_date=start_date,
                end_date=end_date,
                status=status or resolve_status(now, start_date, end_date, "upcoming"),
                created_by=creator_id,
            )
            db.session.add(election)
            db.session.commit()
            return election.id

    def coalition(self, election_id, name=None, color="#10b981"):
        with self.app.app_context():
            coalition = Coalition(election_id=election_id, name=name or f"Coalition {self._next()}", color=color)
            db.session.add(coalition)
            db.session.commit()
            return coalition.id

    def candidate(self, election_id, coalition_id=None, position="chairperson", name=None):
        with self.app.app_context():
            candidate = Candidate(
                election_id=election_id,
                coalition_id=coalition_id,
                name=name or f"Candidate {self._next()}",
                position=position,
            )
            db.session.add(candidate)
            db.session.commit()
            return candidate.id


@pytest.fixture
def start_time():
    return datetime(2026, 3, 2, 12, 0, 0)


@pytest.fixture
def clock(start_time):
    return FrozenClock(start_time)


@pytest.fixture
def app(clock):
    app = create_app('testing', clock=clock)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def make_app(clock):
    """Build extra apps with config overrides; each comes with its own Seed."""
    created = []

    def factory(**overrides):
        app = create_app('testing', clock=clock, **overrides)
        created.append(app)
        return app, Seed(app, clock)

    yield factory
    for app in created:
        reconciler = app.extensions.get('univote_status_reconciler')
        if reconciler is not None:
            reconciler.stop()
        with app.app_context():
            db.drop_all()


@pytest.fixture
def ctx(app):
    """App context for calling services directly (HTTP tests must not hold one open)."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def seed(app, clock):
    return Seed(app, clock)


@pytest.fixture
def admin_id(seed):
    return seed.admin()


@pytest.fixture
def voter_id(seed):
    return seed.user()


@pytest.fixture
def admin_headers(seed, admin_id):
    return seed.headers(admin_id)


@pytest.fixture
def voter_headers(seed, voter_id):
    return seed.headers(voter_id)
