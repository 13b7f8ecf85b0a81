from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
# Only used as a server runner and for background tasks; clients poll over HTTP
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from icebreaker.main import main
    flask_app.register_blueprint(main, url_prefix='/api/admin')

    from icebreaker.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    from icebreaker.api.sessions import sessions
    flask_app.register_blueprint(sessions, url_prefix='/api/sessions')

    from icebreaker.errors import GameError

    @flask_app.errorhandler(GameError)
    def handle_game_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    # Flask-Login user loader; only admins hold a login session
    from icebreaker.models import Admin

    @login_manager.user_loader
    def load_admin(admin_id):
        return db.session.get(Admin, int(admin_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Admin login required'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database with the default admin."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            password = flask_app.config.get('DEFAULT_ADMIN_PASSWORD')
            if password:
                admin = Admin(username=flask_app.config.get('DEFAULT_ADMIN_USERNAME', 'admin'))
                admin.set_password(password)
                db.session.add(admin)
                db.session.commit()
                print(f'Database has been reset and seeded with admin {admin.username!r}!')
            else:
                print('Database has been reset. Set DEFAULT_ADMIN_PASSWORD to seed an admin.')

    @click.command('create-admin')
    @click.argument('username')
    @click.password_option()
    def create_admin_command(username, password):
        """Creates an admin account, or resets the password of an existing one."""
        with flask_app.app_context():
            admin = Admin.query.filter_by(username=username).first()
            if admin is None:
                admin = Admin(username=username)
            admin.set_password(password)
            db.session.add(admin)
            db.session.commit()
            print(f'Admin {username!r} saved.')

    @click.command('sweep-rooms')
    def sweep_rooms_command():
        """Deactivates every active room whose expiry has passed."""
        from icebreaker.services.game.rooms import sweep_expired
        with flask_app.app_context():
            expired = sweep_expired()
            print(f'Deactivated {len(expired)} expired room(s).')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(create_admin_command)
    flask_app.cli.add_command(sweep_rooms_command)

    return flask_app
