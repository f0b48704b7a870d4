# univote/authentication/accounts.py

import hmac
import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError

from univote.authentication.rbac import UserRole
from univote.database.models import Election, User, Vote
from univote.errors import Conflict, Unauthorized, ValidationError, VotingSystemError
from univote.extensions import db
from univote.security.input_validator import validator

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_NAME = 'Admin User'
DEFAULT_ADMIN_REGISTRATION_NUMBER = 'ADMIN001'


def password_service():
    return current_app.extensions['univote_password_hasher']


def get_user_by_email(email):
    return db.session.query(User).filter_by(email=email).first()


def admin_exists():
    return db.session.query(User.id).filter_by(role=UserRole.ADMIN.value).first() is not None


def _new_user(name, email, password, registration_number, year, role):
    # Password policy and hashing are explicit steps here, never a model hook
    return User(
        name=name,
        email=email,
        password_hash=password_service().hash_password(password),
        registration_number=registration_number,
        year=year,
        role=role,
    )


def _commit_new_user(user, message):
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict(message) from None
    return user


def register_user(data) -> User:
    validator.require_fields(
        data, ['name', 'email', 'password', 'registrationNumber', 'year'], 'All fields are required'
    )
    email = str(data['email']).strip().lower()
    if not validator.validate_email(email):
        raise ValidationError('Invalid email format')
    year = validator.parse_year(data['year'])
    password_service().check_policy(data['password'])
    registration_number = str(data['registrationNumber']).strip()
    if not validator.validate_registration_number(registration_number):
        raise ValidationError('Invalid registration number')

    duplicate = db.session.query(User).filter(
        db.or_(User.email == email, User.registration_number == registration_number)
    ).first()
    if duplicate is not None:
        raise Conflict('Email or Registration Number already exists')

    user = _new_user(
        name=validator.sanitize_plain(data['name'], max_length=100),
        email=email,
        password=data['password'],
        registration_number=registration_number,
        year=year,
        role=UserRole.VOTER.value,
    )
    return _commit_new_user(user, 'Email or Registration Number already exists')


def authenticate(email, password) -> User:
    if not email or not password:
        raise ValidationError('Email and password are required')
    if not isinstance(email, str) or not isinstance(password, str):
        raise ValidationError('Email and password must be text')

    user = get_user_by_email(str(email).strip().lower())
    service = password_service()
    if user is None or not service.verify_password(password, user.password_hash):
        raise Unauthorized('Invalid email or password')

    if service.needs_rehash(user.password_hash):
        user.password_hash = service.hash_password(password)
        db.session.commit()
    return user


def change_password(user: User, current_password, new_password):
    if not current_password or not new_password:
        raise ValidationError('Current password and new password are required')
    if not isinstance(current_password, str) or not isinstance(new_password, str):
        raise ValidationError('Current password and new password must be text')
    service = password_service()
    service.check_policy(new_password, label='New password')
    if not service.verify_password(current_password, user.password_hash):
        raise ValidationError('Current password is incorrect')

    user.password_hash = service.hash_password(new_password)
    db.session.commit()


def create_admin(name, email, password, registration_number, year=1) -> User:
    email = str(email).strip().lower()
    if not validator.validate_email(email):
        raise ValidationError('Invalid email format')
    if get_user_by_email(email) is not None:
        raise Conflict('Email already registered')
    user = _new_user(name, email, password, registration_number, year, UserRole.ADMIN.value)
    return _commit_new_user(user, 'Email or Registration Number already exists')


def setup_first_admin(data) -> User:
    """Create the first administrator, guarded by the configured setup token."""
    setup_token = current_app.config.get('SETUP_TOKEN')
    if not setup_token:
        logger.error('SETUP_TOKEN is not configured. Admin setup is disabled.')
        raise VotingSystemError('System configuration error. Please contact system administrator.')

    supplied = (data or {}).get('setupToken') or ''
    if not isinstance(supplied, str) or not hmac.compare_digest(supplied.encode(), setup_token.encode()):
        raise Unauthorized('Invalid setup credentials')

    if admin_exists():
        raise Conflict('Admin user already exists. Please contact system administrator.')

    validator.require_fields(data, ['name', 'email', 'password', 'registrationNumber'], 'All fields are required')
    password_service().check_policy(data['password'])
    return create_admin(
        name=validator.sanitize_plain(data['name'], max_length=100),
        email=data['email'],
        password=data['password'],
        registration_number=str(data['registrationNumber']).strip(),
    )


def ensure_default_admin(config):
    if admin_exists():
        logger.info('Admin user already exists')
        return None

    admin = _commit_new_user(
        _new_user(
            name=DEFAULT_ADMIN_NAME,
            email=config['DEFAULT_ADMIN_EMAIL'],
            password=config['DEFAULT_ADMIN_PASSWORD'],
            registration_number=DEFAULT_ADMIN_REGISTRATION_NUMBER,
            year=1,
            role=UserRole.ADMIN.value,
        ),
        'Default admin account conflicts with an existing user',
    )
    logger.warning(
        'Default admin user created (%s). Change this password after first login!', admin.email
    )
    return admin


def system_stats():
    return {
        'totalUsers': db.session.query(db.func.count(User.id)).filter(User.role == UserRole.VOTER.value).scalar(),
        'totalElections': db.session.query(db.func.count(Election.id)).scalar(),
        'totalVotes': db.session.query(db.func.count(Vote.id)).scalar(),
    }
