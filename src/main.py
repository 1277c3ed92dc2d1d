"""
src/main.py
============================================
FastAPI Application for the Vehicle Trip Log
============================================

Main entry point of the trip log backend. Trips are started and completed
over REST; lifecycle state, GPS waypoints and the driver's notes travel
inside the trip's `notes` field (see src/Services/trip_notes).

Architecture Overview:
---------------------
- REST API: trip lifecycle, listing and statistics under /trips
- Database: SQLAlchemy sessions per request (src/Controller/deps.py)
- Migrations: Alembic (alembic upgrade head)

Run:
    uvicorn src.main:app --reload
"""

# Environment Configuration
from dotenv import load_dotenv
import os
load_dotenv()

# FastAPI Core
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from src.Core.config import settings
from src.Controller.Routes import trips
from src.DB.database import check_db_connection


# ============================================================
# DYNAMIC CORS CONFIGURATION
# ============================================================
def _parse_origins(csv_value: str):
    """
    Parse comma-separated origin values into a list for CORS configuration.

    Args:
        csv_value: Comma-separated string of allowed origins

    Returns:
        Tuple of (is_wildcard: bool, origins: list)

    Examples:
        "*" → (True, ["*"])
        "https://app.com,https://admin.app.com" → (False, ["https://app.com", "https://admin.app.com"])
        "" → (False, [])
    """
    if not csv_value:
        return (False, [])

    csv_value = csv_value.strip()

    if csv_value == "*":
        return (True, ["*"])

    origins = [origin.strip() for origin in csv_value.split(",") if origin.strip()]
    return (False, origins)


_http_allow_all, _http_origins = _parse_origins(
    os.getenv("HTTP_ALLOWED_ORIGINS", "*")
)


# ============================================================
# APPLICATION LIFESPAN MANAGEMENT
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Startup:
        - Verify the database is reachable (the app still starts if not,
          requests will fail until it is)

    Shutdown:
        - Log only; sessions are closed per request
    """
    if check_db_connection():
        print("[STARTUP] ✅ Database connection OK")
    else:
        print("[STARTUP] ⚠️  Database not reachable, check DATABASE_URL")

    print(f"[STARTUP] ✅ {settings.PROJECT_NAME} {settings.PROJECT_VERSION} ready")

    yield

    print("[SHUTDOWN] 🛑 Application shutdown initiated")


# ============================================================
# APPLICATION INSTANCE CREATION
# ============================================================
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_http_origins,
    allow_credentials=not _http_allow_all,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    """Health check endpoint for load balancers and container probes."""
    return {"status": "ok"}


# ============================================================
# REST API ROUTE REGISTRATION
# ============================================================
app.include_router(trips.router, prefix="/trips", tags=["trips"])


@app.get("/api")
def api_info():
    """API information endpoint."""
    return {
        "status": "online",
        "version": settings.PROJECT_VERSION,
        "features": {
            "local_timezone": settings.TRIP_LOCAL_TIMEZONE,
            "strict_completion": settings.TRIP_STRICT_COMPLETION,
        },
        "endpoints": {
            "trips": "/trips/*",
            "health": "/health"
        }
    }
