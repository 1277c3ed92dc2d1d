"""
src/DB/base.py
==========================
SQLAlchemy Model Registry
==========================

Imports every model so that Base.metadata is complete before Alembic
autogenerate or create_all() inspect it.

Models Registered:
-----------------
- Trip: Vehicle trip log entries (table 'vehicle_trips')

Important:
----------
Any new model classes MUST be imported here.
"""

from src.DB.base_class import Base

# ============================================================
# MODEL IMPORTS - DO NOT REMOVE
# ============================================================
from src.Models.trip import Trip

__all__ = ["Base", "Trip"]
