# univote/database/models.py

import sqlite3
from enum import Enum

from sqlalchemy import event
from sqlalchemy.engine import Engine

from univote.authentication.rbac import UserRole
from univote.clock import isoformat, utcnow
from univote.extensions import db

# Schema for users, elections and their coalitions, candidates and votes


class ElectionStatus(Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    CLOSED = "closed"


class CandidatePosition(Enum):
    CHAIRPERSON = "chairperson"
    VICE_CHAIR = "vice_chair"
    SECRETARY = "secretary"
    SPORTS_PERSON = "sports_person"
    TREASURER = "treasurer"
    GENDER_REPRESENTATIVE = "gender_representative"


ELECTION_STATUSES = [s.value for s in ElectionStatus]
CANDIDATE_POSITIONS = [p.value for p in CandidatePosition]
DEFAULT_COALITION_COLOR = "#10b981"


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE rules unless foreign keys are switched on per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class TimestampMixin:
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class User(TimestampMixin, db.Model):
    __tablename__ = 'users'
    __table_args__ = (
        db.CheckConstraint('year BETWEEN 1 AND 4', name='ck_users_year'),
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(100), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)  # Argon2id hash, set by the account service
    registration_number = db.Column(db.String(50), unique=True, nullable=False)
    year = db.Column(db.Integer, nullable=False, default=1)
    role = db.Column(db.String(20), nullable=False, default=UserRole.VOTER.value)

    votes = db.relationship('Vote', backref='voter', lazy=True)

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN.value

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'registrationNumber': self.registration_number,
            'year': self.year,
            'role': self.role,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }

    def to_public_dict(self):
        return {'id': self.id, 'name': self.name, 'email': self.email, 'role': self.role}

    def __repr__(self):
        return f'<User {self.id} {self.email}>'


class Election(TimestampMixin, db.Model):
    __tablename__ = 'elections'
    __table_args__ = (
        db.CheckConstraint('end_date > start_date', name='ck_elections_dates'),
    )

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text, nullable=True)
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    # Cached value; the status reconciler keeps it in line with the dates
    status = db.Column(db.String(10), nullable=False, default=ElectionStatus.UPCOMING.value, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    creator = db.relationship('User', backref='elections')
    coalitions = db.relationship(
        'Coalition', backref='election', cascade='all, delete-orphan',
        passive_deletes=True, order_by='Coalition.id',
    )
    candidates = db.relationship(
        'Candidate', backref='election', cascade='all, delete-orphan', passive_deletes=True,
    )
    votes = db.relationship(
        'Vote', backref='election', cascade='all, delete-orphan', passive_deletes=True, lazy='dynamic',
    )

    def to_dict(self, include_creator=False):
        data = {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'startDate': isoformat(self.start_date),
            'endDate': isoformat(self.end_date),
            'status': self.status,
            'createdBy': self.created_by,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }
        if include_creator and self.creator is not None:
            data['creator'] = self.creator.to_public_dict()
        return data

    def __repr__(self):
        return f'<Election {self.id} {self.status}>'


class Coalition(TimestampMixin, db.Model):
    __tablename__ = 'coalitions'
    __table_args__ = (
        db.UniqueConstraint('election_id', 'name', name='uq_coalitions_election_name'),
    )

    id = db.Column(db.Integer, primary_key=True)
    election_id = db.Column(db.Integer, db.ForeignKey('elections.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(150), nullable=False)
    symbol = db.Column(db.String(100), nullable=True)
    color = db.Column(db.String(7), nullable=True, default=DEFAULT_COALITION_COLOR)

    # Removing a coalition keeps its candidates, unassigned
    candidates = db.relationship('Candidate', backref='coalition', passive_deletes=True)

    def to_dict(self):
        return {
            'id': self.id,
            'electionId': self.election_id,
            'name': self.name,
            'symbol': self.symbol,
            'color': self.color,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }


class Candidate(TimestampMixin, db.Model):
    __tablename__ = 'candidates'

    id = db.Column(db.Integer, primary_key=True)
    coalition_id = db.Column(db.Integer, db.ForeignKey('coalitions.id', ondelete='SET NULL'), nullable=True, index=True)
    election_id = db.Column(db.Integer, db.ForeignKey('elections.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    position = db.Column(db.String(30), nullable=False)
    bio = db.Column(db.Text, nullable=True)
    image_url = db.Column(db.String(255), nullable=True)

    def to_dict(self, include_coalition=False):
        data = {
            'id': self.id,
            'electionId': self.election_id,
            'coalitionId': self.coalition_id,
            'name': self.name,
            'position': self.position,
            'bio': self.bio,
            'imageUrl': self.image_url,
        }
        if include_coalition:
            coalition = self.coalition
            data['coalition'] = (
                {'id': coalition.id, 'name': coalition.name, 'color': coalition.color}
                if coalition is not None else None
            )
        return data


class Vote(db.Model):
    __tablename__ = 'votes'
    # One ballot per voter per election, enforced by the engine
    __table_args__ = (
        db.UniqueConstraint('election_id', 'voter_id', name='uq_votes_election_voter'),
    )

    id = db.Column(db.Integer, primary_key=True)
    election_id = db.Column(db.Integer, db.ForeignKey('elections.id', ondelete='CASCADE'), nullable=False)
    coalition_id = db.Column(db.Integer, db.ForeignKey('coalitions.id'), nullable=False, index=True)
    voter_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    voted_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    coalition = db.relationship('Coalition')

    def __repr__(self):
        return f'<Vote {self.id} by User {self.voter_id}>'
