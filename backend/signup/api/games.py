from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from sqlalchemy.exc import SQLAlchemyError

from signup import db
from signup.exceptions import PersistenceFailure, SignupError, ValidationFailed
from signup.services.games import admission, lifecycle
from signup.socketio_events import notify_registrations


games = Blueprint('games', __name__)


@games.errorhandler(SignupError)
def handle_signup_error(exc):
    return jsonify(exc.to_dict()), exc.status_code


@games.errorhandler(SQLAlchemyError)
def handle_storage_error(exc):
    db.session.rollback()
    current_app.logger.error(f"[db-fail] path={request.path} error={exc}")
    failure = PersistenceFailure()
    return jsonify(failure.to_dict()), failure.status_code


def _body_game_id() -> int:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationFailed('Request body must be a JSON object')
    game_id = data.get('game_id')
    # bool is an int subclass; floats would be truncated
    if not isinstance(game_id, int) or isinstance(game_id, bool):
        raise ValidationFailed('game_id is required and must be an integer')
    return game_id


@games.route('/current-game', methods=['GET'])
@login_required
def current_game():
    game = lifecycle.ensure_current_week_game()
    return jsonify(game.to_dict())


@games.route('/game/<int:game_id>/registrations', methods=['GET'])
@login_required
def game_registrations(game_id):
    rows = admission.list_registrations(game_id)
    return jsonify([
        {'registration': registration.to_dict(), 'user': user.to_dict()}
        for registration, user in rows
    ])


@games.route('/register', methods=['POST'])
@login_required
def register():
    game_id = _body_game_id()
    registration = admission.register(current_user.id, game_id)
    notify_registrations(game_id)
    return jsonify(registration.to_dict()), 201


@games.route('/unregister', methods=['DELETE'])
@login_required
def unregister():
    game_id = _body_game_id()
    removed = admission.unregister(current_user.id, game_id)
    if removed:
        notify_registrations(game_id)
    return jsonify({'success': True})


@games.route('/my-registration/<int:game_id>', methods=['GET'])
@login_required
def my_registration(game_id):
    return jsonify({'is_registered': admission.is_registered(current_user.id, game_id)})
