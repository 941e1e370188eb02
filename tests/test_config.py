"""Tests for settings and pattern file loading."""

import json
import pytest

from src.pattern_registry.config.pattern_loader import load_patterns, parse_patterns
from src.pattern_registry.config.settings import Settings
from src.pattern_registry.exceptions import CompileError, ConfigurationError

ENV_VARS = ['DATABASE_URL', 'JWT_SECRET', 'LISTEN_HOST', 'LISTEN_PORT', 'MATCHER_PORT', 'PATTERN_FILE']

@pytest.fixture
def clean_env(monkeypatch):
    """Remove settings variables from the environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch

class TestSettings:
    """Tests for environment settings."""

    def test_defaults(self, clean_env):
        settings = Settings.from_env(load_env_file=False)
        assert settings.database_url == 'sqlite:///pattern_registry.db'
        assert settings.jwt_secret is None
        assert settings.listen_host == '0.0.0.0'
        assert settings.listen_port == 8080
        assert settings.matcher_port == 8081
        assert settings.pattern_file == 'patterns.json'

    def test_reads_environment(self, clean_env):
        clean_env.setenv('DATABASE_URL', 'mysql+pymysql://user:pw@db/patternregistry')
        clean_env.setenv('JWT_SECRET', 's3cret')
        clean_env.setenv('LISTEN_PORT', '9000')
        clean_env.setenv('PATTERN_FILE', '/etc/patterns.json')

        settings = Settings.from_env(load_env_file=False)

        assert settings.database_url == 'mysql+pymysql://user:pw@db/patternregistry'
        assert settings.require_jwt_secret() == 's3cret'
        assert settings.listen_port == 9000
        assert settings.pattern_file == '/etc/patterns.json'

    def test_invalid_port(self, clean_env):
        clean_env.setenv('LISTEN_PORT', 'eighty')
        with pytest.raises(ConfigurationError):
            Settings.from_env(load_env_file=False)

    def test_missing_jwt_secret(self, clean_env):
        with pytest.raises(ConfigurationError):
            Settings.from_env(load_env_file=False).require_jwt_secret()

class TestPatternLoader:
    """Tests for loading the matcher's pattern file."""

    def test_load_patterns(self, tmp_path):
        pattern_file = tmp_path / "patterns.json"
        pattern_file.write_text(json.dumps([
            {"id": 1, "pattern": r"nginx/(?P<version>[\d.]+)", "component": "nginx"},
            {"id": 2, "pattern": r"^ERROR", "component": "logs"}
        ]))

        patterns = load_patterns(pattern_file)

        assert isinstance(patterns, tuple)
        assert [p.id for p in patterns] == [1, 2]
        assert patterns[0].match(b"nginx/1.0")[0].version == "1.0"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_patterns(tmp_path / "missing.json")

    def test_malformed_json(self, tmp_path):
        pattern_file = tmp_path / "patterns.json"
        pattern_file.write_text("[{")
        with pytest.raises(ConfigurationError):
            load_patterns(pattern_file)

    @pytest.mark.parametrize("data", [
        {"pattern": "a"},
        [{"component": "no pattern"}],
        [{"pattern": 5}],
        [{"pattern": "a", "id": "one"}]
    ])
    def test_schema_violations(self, data):
        with pytest.raises(ConfigurationError):
            parse_patterns(data)

    def test_invalid_expression_aborts_load(self):
        with pytest.raises(CompileError):
            parse_patterns([{"pattern": "ok"}, {"pattern": "(broken"}])
