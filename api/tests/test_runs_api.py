"""Tests for the run history API."""

import sys

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from api.src.db.database import get_db
from api.src.main import app
from runner.src.models.stage import CommandStage
from runner.src.services.stage_runner import StageRunner
from runner.src.services.status_reporter import StatusReporter, build_engine

PY = sys.executable

@pytest.fixture
def reporter(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'runs.db'}")
    reporter = StatusReporter(engine=engine)
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)

    def override_get_db():
        with SessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield reporter
    app.dependency_overrides.clear()

@pytest.fixture
def client(reporter):
    return TestClient(app)

def record_run(reporter, workspace, *codes):
    stages = [
        CommandStage(name=name, command=PY, arguments=("-c", f"import sys; sys.exit({code})"))
        for name, code in zip(["Build", "Test", "Docker Build"], codes)
    ]
    runner = StageRunner(reporter=reporter, sink=lambda stage, line: None)
    return runner.run(stages, workspace, pipeline_name="service")

def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"

def test_db_health(client):
    response = client.get("/health/db")
    assert response.json() == {"status": "healthy", "database": "connected"}

def test_list_runs(client, reporter, tmp_path):
    succeeded = record_run(reporter, tmp_path, 0, 0, 0)
    failed = record_run(reporter, tmp_path, 0, 2, 0)

    response = client.get("/api/runs")
    assert response.status_code == 200
    runs = {run["id"]: run for run in response.json()}
    assert set(runs) == {succeeded.id, failed.id}
    assert runs[failed.id]["status"] == "failed"
    assert runs[failed.id]["exit_code"] == 2
    assert len(runs[failed.id]["results"]) == 2

def test_list_runs_by_status(client, reporter, tmp_path):
    record_run(reporter, tmp_path, 0, 0, 0)
    failed = record_run(reporter, tmp_path, 1, 0, 0)

    response = client.get("/api/runs", params={"status": "failed"})
    assert [run["id"] for run in response.json()] == [failed.id]

def test_get_run(client, reporter, tmp_path):
    run = record_run(reporter, tmp_path, 0, 0, 1)

    response = client.get(f"/api/runs/{run.id}")
    assert response.status_code == 200
    body = response.json()
    assert body["pipeline_name"] == "service"
    assert body["stage_count"] == 3
    assert [r["stage_name"] for r in body["results"]] == ["Build", "Test", "Docker Build"]
    assert [r["status"] for r in body["results"]] == ["succeeded", "succeeded", "failed"]

def test_get_run_results(client, reporter, tmp_path):
    run = record_run(reporter, tmp_path, 0, 7, 0)

    response = client.get(f"/api/runs/{run.id}/results")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "failed"
    assert body["stages_run"] == 2
    assert body["stage_count"] == 3
    assert body["results"][1]["exit_code"] == 7
    assert body["results"][1]["failure"] == "non_zero_exit"

def test_unknown_run(client):
    assert client.get("/api/runs/does-not-exist").status_code == 404
    assert client.get("/api/runs/does-not-exist/results").status_code == 404

def test_stats(client, reporter, tmp_path):
    record_run(reporter, tmp_path, 0, 0, 0)
    record_run(reporter, tmp_path, 0, 0, 1)
    record_run(reporter, tmp_path, 3, 0, 0)

    body = client.get("/api/stats").json()
    assert body["total_runs"] == 3
    assert body["runs"] == {"succeeded": 1, "failed": 2}
    assert body["failures"] == {"non_zero_exit": 2}
