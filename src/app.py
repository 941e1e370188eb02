from flask import Blueprint, Flask, current_app, g, jsonify, request
from sqlalchemy import text
from sqlalchemy.engine import Engine
from typing import Optional
import logging

from src.pattern_registry.auth import require_principal
from src.pattern_registry.config.database import create_db_engine, create_session_factory, init_db
from src.pattern_registry.config.settings import Settings
from src.pattern_registry.db_service import RegistryPatternDBService
from src.pattern_registry.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CompileError,
    FilterError,
    NotFoundError,
    RegistryError,
    ValidationError
)
from src.pattern_registry.filters import parse_query_filters
from src.pattern_registry.registry_service import RegistryService

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Error kinds and the status code each is reported with; anything else is a 500
ERROR_STATUS = (
    (CompileError, 400),
    (FilterError, 400),
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)

# pattern-registry is the API identifier for this API
registry_api = Blueprint('registry', __name__, url_prefix='/pattern-registry')

def _registry_service() -> RegistryService:
    """Build a registry service bound to the request's database session."""
    session_factory = current_app.extensions['pattern_registry_sessions']
    return RegistryService(RegistryPatternDBService(session_factory()))

def _request_payload():
    payload = request.get_json(silent=True)
    if payload is None:
        raise ValidationError("Request body must be a JSON object")
    return payload

@registry_api.route('/patterns', methods=['GET'])
def read_patterns():
    """List patterns, narrowed by ``attribute[operator]=value`` query filters."""
    filters = parse_query_filters(request.args)
    patterns = _registry_service().list_patterns(filters)
    return jsonify([p.to_dict() for p in patterns]), 200

@registry_api.route('/patterns/<int:pattern_id>', methods=['GET'])
def read_pattern(pattern_id):
    """Get a single pattern."""
    return jsonify(_registry_service().get_pattern(pattern_id).to_dict()), 200

@registry_api.route('/patterns', methods=['POST'])
@require_principal
def create_pattern():
    """Register a pattern owned by the caller's organization."""
    pattern = _registry_service().create_pattern(_request_payload(), g.principal)
    return jsonify(pattern.to_dict()), 201

@registry_api.route('/patterns/<int:pattern_id>', methods=['POST'])
@require_principal
def update_pattern(pattern_id):
    """Replace the expression of a pattern owned by the caller's organization."""
    pattern = _registry_service().update_pattern(pattern_id, _request_payload(), g.principal)
    return jsonify(pattern.to_dict()), 200

@registry_api.route('/patterns/<int:pattern_id>', methods=['DELETE'])
@require_principal
def delete_pattern(pattern_id):
    """Delete a pattern owned by the caller's organization."""
    _registry_service().delete_pattern(pattern_id, g.principal)
    return '', 204

@registry_api.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint for Kubernetes probes."""
    try:
        session = current_app.extensions['pattern_registry_sessions']()
        session.execute(text('SELECT 1'))
        return jsonify({'status': 'healthy', 'database': 'connected'}), 200
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        return jsonify({'status': 'unhealthy', 'error': 'database unavailable'}), 500

def handle_registry_error(error: RegistryError):
    """Report a registry error with the status code for its kind."""
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            logger.info(f"Rejected {request.method} {request.path}: {error}")
            return jsonify({'code': status, 'error': str(error)}), status
    return handle_unexpected_error(error)

def handle_unexpected_error(error: Exception):
    """Log an unknown failure without exposing it to the client."""
    logger.exception(f"Internal server error on {request.method} {request.path}: {error}")
    return jsonify({'code': 500, 'error': 'Internal Server Error'}), 500

def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> Flask:
    """
    Create the registry application.

    Args:
        settings: Service settings; loaded from the environment if omitted
        engine: Database engine; created from ``settings.database_url`` if omitted

    Raises:
        ConfigurationError: If no JWT secret is configured
    """
    settings = settings or Settings.from_env()

    app = Flask(__name__)
    app.config['JWT_SECRET'] = settings.require_jwt_secret()

    engine = engine or create_db_engine(settings.database_url)
    init_db(engine)
    sessions = create_session_factory(engine)
    app.extensions['pattern_registry_sessions'] = sessions

    @app.teardown_appcontext
    def remove_session(exception=None):
        sessions.remove()

    app.register_blueprint(registry_api)
    app.register_error_handler(RegistryError, handle_registry_error)
    app.register_error_handler(500, handle_unexpected_error)
    return app

if __name__ == '__main__':
    settings = Settings.from_env()
    app = create_app(settings)
    app.run(host=settings.listen_host, port=settings.listen_port)
