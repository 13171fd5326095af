from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user

from signup.exceptions import SignupError, ValidationFailed
from signup.services.identity import verify_identity_token
from signup.services.users import upsert_user

main = Blueprint('main', __name__)


@main.errorhandler(SignupError)
def handle_signup_error(exc):
    return jsonify(exc.to_dict()), exc.status_code


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the weekly signup server!'})


@main.route('/api/login', methods=['POST'])
def login():
    """Start a session from a signed identity token ``{"token": ...}``.

    The identity provider signs the claims; unsigned, tampered or stale
    tokens are rejected with 401. Every login refreshes the stored profile.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationFailed('Request body must be a JSON object')
    claims = verify_identity_token(data.get('token'))
    user = upsert_user(claims)
    login_user(user, remember=True)
    return jsonify({'success': True, 'user': user.to_dict()})


@main.route('/api/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})


@main.route('/api/auth/user')
@login_required
def auth_user():
    return jsonify(current_user.to_dict())
