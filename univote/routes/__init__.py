# univote/routes/__init__.py

from werkzeug.routing import IntegerConverter

from univote.routes.admin import admin_bp
from univote.routes.auth import auth_bp
from univote.routes.candidates import candidates_bp
from univote.routes.coalitions import coalitions_bp
from univote.routes.elections import elections_bp
from univote.routes.health import health_bp
from univote.routes.results import results_bp
from univote.routes.users import users_bp
from univote.routes.votes import votes_bp
from univote.security.input_validator import MAX_ID

BLUEPRINTS = [
    (auth_bp, '/api/auth'),
    (users_bp, '/api/users'),
    (elections_bp, '/api/elections'),
    (coalitions_bp, '/api/coalitions'),
    (candidates_bp, '/api/candidates'),
    (votes_bp, '/api/votes'),
    (results_bp, '/api/results'),
    (admin_bp, '/api/admin'),
    (health_bp, '/api/health'),
]


class IdConverter(IntegerConverter):
    """``<int:...>`` path segments that fit a stored id; larger values do not match."""

    def __init__(self, map, *args, **kwargs):
        kwargs.setdefault('max', MAX_ID)
        super().__init__(map, *args, **kwargs)


def register_blueprints(app):
    # Must be in place before any rule using it is added
    app.url_map.converters['int'] = IdConverter
    for blueprint, prefix in BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=prefix)
