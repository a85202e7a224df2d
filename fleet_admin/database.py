# fleet_admin/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL (SQLite accepted for local runs and tests).
All models are auto-imported here so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from fleet_admin.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool    # one shared in-memory DB
        return options
    return {
        "pool_pre_ping": True,       # Auto-reconnect if DB connection drops
        "pool_size": 10,
        "max_overflow": 20,
    }


engine = create_engine(settings.DATABASE_URL, echo=False, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency: yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from fleet_admin.models.vehicle import Vehicle          # noqa
    from fleet_admin.models.department import Department    # noqa
    from fleet_admin.models.employee import Employee        # noqa
    from fleet_admin.models.brand import Brand              # noqa
    from fleet_admin.models.insurance import Insurance      # noqa
    from fleet_admin.models.road_worth import RoadWorth     # noqa
    from fleet_admin.models.vehicle_driver_log import VehicleDriverLog  # noqa

    Base.metadata.create_all(bind=engine)
