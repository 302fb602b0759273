"""
Database engine and session setup (SQLAlchemy)
"""
from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
import logging

# Base is created before importing config to avoid a circular import
Base = declarative_base()

from eyemate.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def build_engine(url: str):
    """Create an engine with pooling suited to the backend"""
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})

    return create_engine(
        url,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=3600,  # recycle connections every hour
        echo=settings.DEBUG,
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    Dependency yielding a database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Create all tables that do not exist yet
    """
    # Register every model on the metadata
    import eyemate.models  # noqa: F401

    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("✅ Tables created/verified")
    except Exception as e:
        logger.error(f"❌ Error creating tables: {e}")
        raise


def drop_tables(bind=None):
    """
    Drop all tables (use with care)
    """
    import eyemate.models  # noqa: F401

    Base.metadata.drop_all(bind=bind or engine)
    logger.warning("⚠️ All tables dropped")


def test_connection() -> bool:
    """
    Check that the database answers
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        return True
    except Exception as e:
        logger.error(f"❌ Database connection error: {e}")
        return False


def get_db_info():
    """
    Server version and database name, for the health endpoint
    """
    if engine.dialect.name != "mysql":
        return {"dialect": engine.dialect.name}

    try:
        with engine.connect() as conn:
            version = conn.execute(text("SELECT VERSION()")).fetchone()[0]
            database = conn.execute(text("SELECT DATABASE()")).fetchone()[0]

            return {
                "mysql_version": version,
                "database_name": database,
                "host": settings.DB_HOST,
                "port": settings.DB_PORT,
                "charset": settings.DB_CHARSET
            }
    except Exception as e:
        logger.error(f"Error reading database info: {e}")
        return None
