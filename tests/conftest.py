"""Shared test fixtures: in-memory SQLite database and a temporary uploads root."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before fleet_admin.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from fleet_admin.config import settings
from fleet_admin.database import Base, SessionLocal, create_tables, engine
from fleet_admin.main import app
from fleet_admin.services.upload_service import UploadAdapter, get_upload_adapter


def vehicle_payload(**overrides):
    """Minimal valid create payload (wire names)."""
    data = {
        "registrationNumber": "GR-1234-20",
        "vinNumber": "1HGCM82633A123456",
        "plateNumber": "GT-555-20",
        "vehicleType": "sedan",
        "make": "Toyota",
        "model": "Corolla",
        "year": 2020,
        "fuelType": "petrol",
    }
    data.update(overrides)
    return data


@pytest.fixture
def db():
    create_tables()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def uploads(tmp_path):
    return UploadAdapter(
        root=str(tmp_path / "uploads"),
        url_prefix="/uploads",
        targets=settings.UPLOAD_TARGETS,
        max_files=5,
        max_file_size=5 * 1024 * 1024,
    )


@pytest.fixture
def client(db, uploads):
    app.dependency_overrides[get_upload_adapter] = lambda: uploads
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
