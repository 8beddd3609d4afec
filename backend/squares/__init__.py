from flask import Flask
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
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config, is_administrator=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from squares.main import main
    flask_app.register_blueprint(main)

    from squares.api.pool import pool_api
    flask_app.register_blueprint(pool_api, url_prefix='/api/pool')

    # One pool per app: store, cached state, claim engine and lifecycle controller
    from squares.identity import admin_email_predicate
    from squares.services.pool.state import Pool
    if is_administrator is None:
        is_administrator = admin_email_predicate(flask_app.config['ADMIN_EMAIL'])
    pool = Pool.from_config(flask_app.config, is_administrator)
    flask_app.extensions['squares_pool'] = pool

    from squares.socketio_events import register_socketio_handlers, broadcast_state
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))
    pool.state.on_change(broadcast_state)

    from squares.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the pool tables (users, squares, config)."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
