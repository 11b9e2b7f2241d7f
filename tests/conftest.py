"""Shared fixtures for training analytics tests."""

import os
import tempfile
from typing import Optional

import pytest

from training_analytics.config import Settings
from training_analytics.db.database import TrainingDatabase
from training_analytics.streams import StreamRecord


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    db = TrainingDatabase(db_path)
    yield db

    # Cleanup
    try:
        os.unlink(db_path)
    except OSError:
        pass


@pytest.fixture
def settings():
    """Settings with the stock breakthrough thresholds."""
    return Settings(
        breakthrough_lookback_days=30,
        min_ftp_increase_pct=3.0,
        min_pace_improvement_pct=2.0,
    )


def ride_stream(
    seconds: int = 3600,
    watts: float = 250,
    hr: Optional[float] = 140,
    cadence: Optional[float] = 90,
) -> StreamRecord:
    """Steady 1 Hz ride."""
    return StreamRecord(
        time=tuple(float(i) for i in range(seconds)),
        power=tuple(float(watts) for _ in range(seconds)),
        heartrate=tuple(float(hr) for _ in range(seconds)) if hr else (),
        cadence=tuple(float(cadence) for _ in range(seconds)) if cadence else (),
    )


def run_stream(
    seconds: int = 600,
    speed: float = 3.0,
    hr: Optional[float] = 150,
    altitude: Optional[float] = 100.0,
    cadence: Optional[float] = 170,
) -> StreamRecord:
    """Steady 1 Hz run on flat ground."""
    return StreamRecord(
        time=tuple(float(i) for i in range(seconds)),
        distance=tuple(speed * i for i in range(seconds)),
        velocity=tuple(speed for _ in range(seconds)),
        heartrate=tuple(float(hr) for _ in range(seconds)) if hr else (),
        altitude=tuple(altitude for _ in range(seconds)) if altitude is not None else (),
        cadence=tuple(float(cadence) for _ in range(seconds)) if cadence else (),
    )


@pytest.fixture
def client(temp_db, settings):
    """API test client backed by the temporary database."""
    from fastapi.testclient import TestClient

    from training_analytics.api import deps
    from training_analytics.main import app
    from training_analytics.services.enrichment import WorkoutEnrichmentService

    service = WorkoutEnrichmentService(training_db=temp_db, settings=settings)
    app.dependency_overrides[deps.get_training_db] = lambda: temp_db
    app.dependency_overrides[deps.get_enrichment_service] = lambda: service

    yield TestClient(app)

    app.dependency_overrides.pop(deps.get_training_db, None)
    app.dependency_overrides.pop(deps.get_enrichment_service, None)
