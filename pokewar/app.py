from flask import Flask, request, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from sqlalchemy.orm.exc import StaleDataError
from pokewar.config import config
from pokewar.errors import PokeWarError

db = SQLAlchemy()


def _parse_allowed_origins(raw_origins):
    if not raw_origins:
        return '*'

    if isinstance(raw_origins, (list, tuple, set)):
        cleaned = [origin for origin in raw_origins if origin]
        return cleaned or '*'

    raw_text = str(raw_origins).strip()
    if not raw_text or raw_text == '*':
        return '*'

    origins = [origin.strip() for origin in raw_text.split(',') if origin.strip()]
    return origins or '*'


def _register_error_handlers(app):
    @app.errorhandler(PokeWarError)
    def _handle_domain_error(error):
        db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(StaleDataError)
    def _handle_stale_write(error):
        db.session.rollback()
        app.logger.warning('Concurrent update rejected: %s', error)
        return jsonify({'error': 'Server was modified concurrently. Please retry.'}), 409


def create_app(config_name='development'):
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    allowed_origins = _parse_allowed_origins(app.config.get('CORS_ALLOWED_ORIGINS', '*'))
    if str(config_name).strip().lower() == 'production':
        secret_key = str(app.config.get('SECRET_KEY') or '').strip()
        if not secret_key or secret_key == 'dev-secret-key-change-in-prod':
            raise RuntimeError('SECRET_KEY must be set to a non-default value in production')
        if allowed_origins == '*':
            raise RuntimeError('CORS_ALLOWED_ORIGINS must be explicitly set in production')

    db.init_app(app)
    CORS(app, resources={r'/api/*': {'origins': allowed_origins}})

    @app.before_request
    def _enforce_origin_for_mutating_api_requests():
        if request.method in {'GET', 'HEAD', 'OPTIONS'}:
            return None
        if not request.path.startswith('/api/'):
            return None

        origin = str(request.headers.get('Origin') or '').strip()
        if not origin:
            return None

        configured_origins = _parse_allowed_origins(
            app.config.get('CORS_ALLOWED_ORIGINS', '*')
        )
        if configured_origins != '*' and origin not in configured_origins:
            return jsonify({'error': 'Invalid request origin'}), 403
        return None

    _register_error_handlers(app)

    from pokewar.routes.auth import auth_bp
    from pokewar.routes.friends import friends_bp
    from pokewar.routes.servers import servers_bp, matches_bp
    from pokewar.routes.roster import roster_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(friends_bp, url_prefix='/api/friends')
    app.register_blueprint(servers_bp, url_prefix='/api/servers')
    app.register_blueprint(matches_bp, url_prefix='/api/matches')
    app.register_blueprint(roster_bp, url_prefix='/api/pokemon')

    @app.route('/api/health')
    def health():
        return jsonify({'status': 'ok'})

    with app.app_context():
        from pokewar import models  # noqa: F401
        db.create_all()

    return app
