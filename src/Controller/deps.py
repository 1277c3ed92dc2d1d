#src/Controller/deps.py

from typing import Generator
from src.DB.session import SessionLocal
from src.Services.trip_lifecycle import TripLifecycle

_lifecycle = TripLifecycle()


def get_DB() -> Generator:
    DB = SessionLocal()
    try:
        yield DB
    finally:
        DB.close()


def get_lifecycle() -> TripLifecycle:
    return _lifecycle
