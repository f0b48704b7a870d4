# univote/security/token_manager.py
from flask import current_app, jsonify
from flask_jwt_extended import create_access_token

from univote.extensions import db, jwt
from univote.database.models import User


# JWT bearer tokens via Flask-JWT-Extended; the identity is the user id
class TokenManager:
    def generate_token(self, user: User) -> str:
        return create_access_token(identity=str(user.id), additional_claims={"role": user.role})


token_manager = TokenManager()


@jwt.user_lookup_loader
def load_user(jwt_header, jwt_data):
    try:
        user_id = int(jwt_data["sub"])
    except (KeyError, TypeError, ValueError):
        return None
    return db.session.get(User, user_id)


def _unauthorized(message):
    return jsonify({"success": False, "message": message}), 401


@jwt.unauthorized_loader
def missing_token_callback(reason):
    return _unauthorized("No authentication token provided")


@jwt.invalid_token_loader
def invalid_token_callback(reason):
    current_app.logger.warning(f"Invalid token presented: {reason}")
    return _unauthorized("Invalid authentication token")


@jwt.expired_token_loader
def expired_token_callback(jwt_header, jwt_payload):
    return _unauthorized("Authentication token has expired")


@jwt.revoked_token_loader
def revoked_token_callback(jwt_header, jwt_payload):
    return _unauthorized("Invalid authentication token")


@jwt.user_lookup_error_loader
def user_lookup_error_callback(jwt_header, jwt_payload):
    return _unauthorized("User not found")
