from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from signup.main import main
    flask_app.register_blueprint(main)

    from signup.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api')

    from signup.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from signup.models import User
    from signup.exceptions import Unauthenticated

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        error = Unauthenticated('Authentication required')
        return jsonify(error.to_dict()), error.status_code

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            users = [
                ('player-1', 'player1@example.com', 'Pat', 'One'),
                ('player-2', 'player2@example.com', 'Sam', 'Two'),
                ('player-3', 'player3@example.com', 'Alex', 'Three'),
            ]
            for uid, email, first, last in users:
                db.session.add(User(id=uid, email=email, first_name=first, last_name=last))

            db.session.commit()
            print('Database has been reset and seeded!')

    @click.command('freeze-week')
    def freeze_week_command():
        """Runs the weekly freeze trigger once."""
        from signup.services.games.scheduler import run_freeze_tick
        game_id = run_freeze_tick(flask_app)
        print(f'Frozen game {game_id}' if game_id else 'Nothing to freeze')

    @click.command('purge-games')
    def purge_games_command():
        """Runs the weekly cleanup trigger once."""
        from signup.services.games.scheduler import run_cleanup_tick
        removed = run_cleanup_tick(flask_app)
        if removed is None:
            raise click.ClickException('Cleanup failed, see logs')
        print(f'Removed {removed} expired game(s)')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(freeze_week_command)
    flask_app.cli.add_command(purge_games_command)

    return flask_app
