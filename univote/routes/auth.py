# univote/routes/auth.py

from flask import Blueprint, current_app
from flask_jwt_extended import current_user, jwt_required

from univote.authentication import accounts
from univote.extensions import limiter
from univote.routes.common import json_body, ok
from univote.security.token_manager import token_manager

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    user = accounts.register_user(json_body())
    return ok(
        201,
        message='Registration successful',
        token=token_manager.generate_token(user),
        user=user.to_public_dict(),
    )


@auth_bp.route('/login', methods=['POST'])
@limiter.limit(
    lambda: current_app.config['LOGIN_RATE_LIMIT'],
    error_message='Too many login attempts. Please try again in 15 minutes.',
)
def login():
    data = json_body()
    user = accounts.authenticate(data.get('email'), data.get('password'))
    return ok(
        message='Login successful',
        token=token_manager.generate_token(user),
        user=user.to_public_dict(),
    )


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def me():
    return ok(user=current_user.to_dict())


@auth_bp.route('/logout', methods=['POST'])
@jwt_required()
def logout():
    # Tokens are stateless; the client discards its copy
    return ok(message='Logged out successfully')
