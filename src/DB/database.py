# src/DB/database.py

"""
Database Utilities Module

Startup and maintenance helpers built on the configured engine.
Request-scoped sessions come from src/Controller/deps.py (get_DB).

Functions:
- check_db_connection(): SELECT 1 against the pool, used at startup
- create_all_tables(): create tables from metadata (development/testing only)
- drop_all_tables(): drop every table (testing only)
"""

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from src.DB.session import SessionLocal, engine


def check_db_connection() -> bool:
    """
    Test database connectivity with a simple query.

    Returns:
        bool: True if database is reachable and responsive, False otherwise

    Notes:
        - Does not raise on database errors (returns False)
        - Logs error details to console for debugging
    """
    try:
        with SessionLocal() as db:
            value = db.execute(text("SELECT 1")).scalar()
            return value == 1
    except SQLAlchemyError as e:
        print(f"[DB] ❌ Connection test failed: {e}")
        return False


def create_all_tables(bind=None):
    """
    Create all database tables defined in models.

    WARNING: Only use in development/testing environments.
    In production, use Alembic migrations instead (alembic upgrade head).

    Args:
        bind: Engine or connection to use (defaults to the application engine)
    """
    from src.DB.base import Base
    print("[DB] 🔨 Creating all tables...")
    Base.metadata.create_all(bind=bind or engine)
    print("[DB] ✅ Tables created successfully")


def drop_all_tables(bind=None):
    """
    Drop all database tables defined in models.

    WARNING: DESTRUCTIVE OPERATION. Testing only.
    """
    from src.DB.base import Base
    print("[DB] 🗑️  Dropping all tables...")
    Base.metadata.drop_all(bind=bind or engine)
    print("[DB] ✅ Tables dropped")
