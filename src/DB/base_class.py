"""
src/DB/base_class.py
=================================
SQLAlchemy Base Model Definition
=================================

Declarative base class for all database models of the trip log backend.

- Extends SQLAlchemy's DeclarativeBase (2.0 style)
- Implements automatic table naming convention (class name -> lowercase table name)
- Models may override __tablename__ (Trip maps to 'vehicle_trips')

Note:
    All application models must inherit from this Base class to be properly
    registered with SQLAlchemy's metadata and discovered by Alembic migrations.
"""

from sqlalchemy.orm import DeclarativeBase, declared_attr


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models in the application.

    Class Attributes:
        __tablename__: Automatically generated from class name (lowercase)
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return cls.__name__.lower()
