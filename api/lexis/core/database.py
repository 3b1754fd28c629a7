from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from lexis.core.config import settings
import logging

logger = logging.getLogger(__name__)


def normalize_database_url(db_url: str) -> str:
    """SQLAlchemy prefers postgresql:// over postgres://."""
    if db_url.startswith("postgres://"):
        return db_url.replace("postgres://", "postgresql://", 1)
    return db_url


def create_db_engine(db_url: str) -> Engine:
    """
    Create a database engine for the given URL.

    PostgreSQL gets a pooled engine. SQLite gets the pysqlite transaction
    recipe so that BEGIN and SAVEPOINT are emitted by SQLAlchemy rather than
    by the driver; quiz package generation relies on savepoints.

    Args:
        db_url: Database URL

    Returns:
        SQLAlchemy engine
    """
    db_url = normalize_database_url(db_url)

    if not db_url.startswith("sqlite"):
        return create_engine(
            db_url,
            echo=False,  # Set to False in production to reduce logs
            pool_pre_ping=True,  # Verify connections before using
            pool_size=5,
            max_overflow=10,
        )

    sqlite_kwargs = {"connect_args": {"check_same_thread": False}}
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        # A single shared connection, otherwise every checkout sees an empty database
        sqlite_kwargs["poolclass"] = StaticPool
    sqlite_engine = create_engine(db_url, echo=False, **sqlite_kwargs)

    @event.listens_for(sqlite_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return sqlite_engine


# Create database engine
db_url = normalize_database_url(settings.database_url)
logger.info(f"Connecting to database: {db_url[:20]}...")  # Log partial URL for debugging

engine = create_db_engine(db_url)


def get_session():
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session


def init_db(target_engine: Engine = None):
    """Initialize database tables."""
    # Import models to register them with SQLModel
    from lexis.models import models  # noqa: F401

    SQLModel.metadata.create_all(target_engine or engine)
