# univote/config.py

import os
from datetime import timedelta

from univote.errors import ConfigurationError

BASE_DIR = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))

KNOWN_WEAK_SECRETS = [
    'your-secret-key-change-in-production',
    'secret',
    'password',
    '123456',
    'default-secret',
    'changeme',
]

MIN_JWT_SECRET_LENGTH = 32


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_list(name, default):
    value = os.environ.get(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'change-me-in-production')
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=7)
    JWT_TOKEN_LOCATION = ['headers']

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL', 'sqlite:///' + os.path.join(BASE_DIR, 'voting_system.sqlite')
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Rate limits are keyed on the client address
    RATELIMIT_ENABLED = _env_bool('RATELIMIT_ENABLED', True)
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_DEFAULT = os.environ.get('RATE_LIMIT_DEFAULT', '100 per 15 minutes')
    RATELIMIT_HEADERS_ENABLED = True
    LOGIN_RATE_LIMIT = os.environ.get('LOGIN_RATE_LIMIT', '5 per 15 minutes')
    VOTE_RATE_LIMIT = os.environ.get('VOTE_RATE_LIMIT', '10 per minute')
    TRUST_PROXY = _env_bool('TRUST_PROXY', False)

    STATUS_SYNC_ENABLED = _env_bool('STATUS_SYNC_ENABLED', True)
    STATUS_SYNC_INTERVAL_SECONDS = int(os.environ.get('STATUS_SYNC_INTERVAL_SECONDS', 5 * 60))

    CREATE_DEFAULT_ADMIN = _env_bool('CREATE_DEFAULT_ADMIN', True)
    DEFAULT_ADMIN_EMAIL = os.environ.get('DEFAULT_ADMIN_EMAIL', 'admin@university.edu')
    DEFAULT_ADMIN_PASSWORD = os.environ.get('DEFAULT_ADMIN_PASSWORD', 'admin')
    SETUP_TOKEN = os.environ.get('SETUP_TOKEN')

    PASSWORD_MIN_LENGTH = int(os.environ.get('PASSWORD_MIN_LENGTH', 6))
    ARGON2_TIME_COST = int(os.environ.get('ARGON2_TIME_COST', 3))
    ARGON2_MEMORY_COST = int(os.environ.get('ARGON2_MEMORY_COST', 65536))
    ARGON2_PARALLELISM = int(os.environ.get('ARGON2_PARALLELISM', 4))

    NTP_SERVERS = _env_list('NTP_SERVERS', [
        'pool.ntp.org',
        'time.google.com',
        'time.windows.com',
        'time.apple.com',
    ])
    MAX_TIME_OFFSET_S = float(os.environ.get('MAX_TIME_OFFSET_S', '0.5'))

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    TRUST_PROXY = _env_bool('TRUST_PROXY', True)


class TestingConfig(Config):
    TESTING = True
    JWT_SECRET_KEY = 'testing-secret-key-that-is-long-enough-for-hs256'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    RATELIMIT_ENABLED = False
    STATUS_SYNC_ENABLED = False
    CREATE_DEFAULT_ADMIN = False
    SETUP_TOKEN = None
    ARGON2_TIME_COST = 1
    ARGON2_MEMORY_COST = 1024
    ARGON2_PARALLELISM = 1


CONFIGS = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
}


def get_config(name=None):
    name = name or os.environ.get('FLASK_ENV') or os.environ.get('APP_ENV') or 'development'
    try:
        return CONFIGS[name]
    except KeyError:
        raise ConfigurationError(f"Unknown configuration '{name}'")


def validate_jwt_secret(secret):
    if not secret:
        raise ConfigurationError(
            'JWT_SECRET_KEY environment variable is not set. Please set JWT_SECRET_KEY.'
        )
    if len(secret) < MIN_JWT_SECRET_LENGTH:
        raise ConfigurationError(
            f'JWT_SECRET_KEY must be at least {MIN_JWT_SECRET_LENGTH} characters long.'
        )
    if secret.lower() in KNOWN_WEAK_SECRETS:
        raise ConfigurationError('JWT_SECRET_KEY is using a known weak value.')
