from flask import Flask, current_app, jsonify, request
from typing import Iterable, Optional
import base64
import binascii
import logging

from src.pattern_registry.config.pattern_loader import load_patterns
from src.pattern_registry.config.settings import Settings
from src.pattern_registry.matching import PatternMatcher
from src.pattern_registry.models import Pattern

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def _matcher() -> PatternMatcher:
    return current_app.extensions['pattern_matcher']

def _match_response(data: bytes):
    matches = _matcher().match(data)
    return jsonify([m.to_dict() for m in matches]), 200

def handle_string_match():
    """Match the raw request body against every loaded pattern."""
    return _match_response(request.get_data())

def handle_string_context_match():
    """
    Match a base64-wrapped string against every loaded pattern.

    Expects JSON of the form ``{"base64": ..., "context": {"type": ..., "value": ...}}``.
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "Error decoding request body"}), 400

    encoded = payload.get("base64")
    if not isinstance(encoded, str):
        return jsonify({"error": "Error decoding request body"}), 400

    try:
        decoded = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        return jsonify({"error": "Error decoding base64 string"}), 400

    context = payload.get("context") or {}
    if context:
        logger.debug(f"Matching {len(decoded)} bytes with context type {context.get('type')}")
    return _match_response(decoded)

def health_check():
    """Health check endpoint for Kubernetes probes."""
    return jsonify({'status': 'healthy', 'patterns': len(_matcher())}), 200

def create_app(settings: Optional[Settings] = None, patterns: Optional[Iterable[Pattern]] = None) -> Flask:
    """
    Create the matcher application.

    Args:
        settings: Service settings; loaded from the environment if omitted
        patterns: Pattern snapshot; loaded from ``settings.pattern_file`` if omitted

    Raises:
        ConfigurationError: If the pattern file is unreadable or malformed
        CompileError: If a pattern in the file does not compile
    """
    if patterns is None:
        settings = settings or Settings.from_env()
        patterns = load_patterns(settings.pattern_file)

    app = Flask(__name__)
    app.extensions['pattern_matcher'] = PatternMatcher(patterns)

    app.add_url_rule('/string/match', 'string_match', handle_string_match, methods=['POST'])
    app.add_url_rule('/string/context/match', 'string_context_match', handle_string_context_match, methods=['POST'])
    app.add_url_rule('/health', 'health', health_check, methods=['GET'])
    return app

if __name__ == '__main__':
    settings = Settings.from_env()
    app = create_app(settings)
    app.run(host=settings.listen_host, port=settings.matcher_port)
