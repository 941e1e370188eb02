import pytest
from src.app import create_app
from src.pattern_registry.auth import Principal, issue_token
from src.pattern_registry.config.database import Base, create_db_engine, create_session_factory, init_db
from src.pattern_registry.config.settings import Settings
from src.pattern_registry.db_service import RegistryPatternDBService
from src.pattern_registry.registry_service import RegistryService

JWT_SECRET = "test-secret"

@pytest.fixture
def engine():
    """Create an in-memory database with the registry schema."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()

@pytest.fixture
def db_session(engine):
    """Create a session on the test database."""
    Session = create_session_factory(engine)
    session = Session()
    yield session
    session.close()
    Session.remove()

@pytest.fixture
def db_service(db_session):
    """Create a database service on the test session."""
    return RegistryPatternDBService(db_session)

@pytest.fixture
def registry_service(db_service):
    """Create a registry service backed by the test database."""
    return RegistryService(db_service)

@pytest.fixture
def principal():
    """Principal acting for organization 7."""
    return Principal(user_id=1, organization_id=7)

@pytest.fixture
def other_principal():
    """Principal acting for organization 8."""
    return Principal(user_id=2, organization_id=8)

@pytest.fixture
def settings():
    """Settings for the registry service under test."""
    return Settings(database_url="sqlite://", jwt_secret=JWT_SECRET)

@pytest.fixture
def app(settings, engine):
    """Create the registry application on the test database."""
    app = create_app(settings, engine)
    app.config['TESTING'] = True
    return app

@pytest.fixture
def client(app):
    """Create a test client for the registry application."""
    with app.test_client() as client:
        yield client

@pytest.fixture
def auth_headers():
    """Build Authorization headers for a principal."""
    def make_headers(principal, secret=JWT_SECRET):
        return {"Authorization": f"Bearer {issue_token(principal, secret)}"}
    return make_headers
