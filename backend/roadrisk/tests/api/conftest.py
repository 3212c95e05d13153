from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from roadrisk.api.deps import get_engine
from roadrisk.api.main import create_app
from roadrisk.infra.db.tables import metadata
from roadrisk.jobs.import_csv import import_segments_from_csv


@pytest.fixture()
def api_engine(tmp_path):
    db_path = tmp_path / "api_tests.db"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    metadata.create_all(engine)
    data_dir = Path(__file__).resolve().parents[4] / "data"
    import_segments_from_csv(data_dir, engine=engine)
    yield engine
    metadata.drop_all(engine)


@pytest.fixture()
def api_client(api_engine):
    app = create_app(engine=api_engine)
    app.dependency_overrides[get_engine] = lambda: api_engine
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture()
def api_client_no_engine(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    app = create_app()
    with TestClient(app) as client:
        yield client
