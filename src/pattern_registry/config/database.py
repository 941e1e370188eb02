"""Database configuration and connection management."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, scoped_session
from sqlalchemy.pool import StaticPool

# DB-API paramstyles and the positional marker each expects
PLACEHOLDERS = {
    'qmark': '?',
    'format': '%s',
    'pyformat': '%s',
}

def create_db_engine(database_url: str) -> Engine:
    """Create an engine with configuration appropriate for the database type."""
    if database_url in ('sqlite://', 'sqlite:///:memory:'):
        # In-memory SQLite must share one connection across threads
        return create_engine(
            database_url,
            echo=False,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
        )
    if database_url.startswith('sqlite:'):
        # SQLite doesn't support pooling
        return create_engine(
            database_url,
            echo=False,  # Set to True to see SQL queries
        )
    # For other databases (PostgreSQL, MySQL, etc.), use connection pooling
    return create_engine(
        database_url,
        echo=False,  # Set to True to see SQL queries
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_pre_ping=True,
    )

def placeholder_for(engine: Engine) -> str:
    """Positional parameter marker for the engine's driver."""
    paramstyle = engine.dialect.paramstyle
    if paramstyle not in PLACEHOLDERS:
        raise ValueError(f"Unsupported DB-API paramstyle: {paramstyle}")
    return PLACEHOLDERS[paramstyle]

def create_session_factory(engine: Engine) -> scoped_session:
    """Create a thread-safe session factory bound to the engine."""
    return scoped_session(sessionmaker(autocommit=False, autoflush=False, bind=engine))

# Base class for declarative models
Base = declarative_base()

def init_db(engine: Engine):
    """Initialize database, creating all tables."""
    Base.metadata.create_all(bind=engine)
