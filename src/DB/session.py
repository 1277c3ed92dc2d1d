"""
src/DB/session.py
======================================
Database Session Configuration Module
======================================

This module establishes the SQLAlchemy database connection and session management
configuration for the trip log backend.

Architecture:
------------
- Engine: Manages the database connection pool and dialect
- SessionLocal: Factory for creating database sessions
- Configuration: Sourced from centralized settings module

Usage Example:
-------------
    from src.DB.session import SessionLocal

    with SessionLocal() as db:
        trips = db.query(Trip).filter(Trip.vehicle_id == "car-01").all()

Session Configuration:
---------------------
- autocommit=False: Transactions must be explicitly committed
- autoflush=False: Changes are not automatically flushed before queries
- bind=engine: Sessions are bound to the configured database engine
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from src.Core.config import settings


# ============================================================
# DATABASE ENGINE CONFIGURATION
# ============================================================
# SQLite connections are shared with FastAPI's threadpool workers
_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args,
    pool_pre_ping=True,
)


# ============================================================
# SESSION FACTORY CONFIGURATION
# ============================================================
SessionLocal = sessionmaker(
    autocommit=False,  # Require explicit commit() for transaction control
    autoflush=False,   # Disable automatic flushing before queries
    bind=engine
)
