import pytest
from fastapi.testclient import TestClient

import matchplay.main as main
from matchplay.course import DEFAULT_COURSE_HOLES
from matchplay.local_store import SqliteResultStore
from matchplay.matchups import load_schedule
from matchplay.scoring import MatchResultRecorder, parse_point_scale
from matchplay.settings import DEFAULT_TOURNAMENT_CONFIG, Settings


@pytest.fixture
def schedule():
    return load_schedule(DEFAULT_TOURNAMENT_CONFIG)


@pytest.fixture
def store(tmp_path):
    result_store = SqliteResultStore(tmp_path / "results.db")
    result_store.ensure_schema()
    return result_store


@pytest.fixture
def recorder(store, schedule):
    return MatchResultRecorder(store, schedule, parse_point_scale("2/1/0"), list(DEFAULT_COURSE_HOLES))


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'api.db'}",
        tournament_config=DEFAULT_TOURNAMENT_CONFIG,
        golf_api_key="test-key",
    )


@pytest.fixture
def client(monkeypatch, test_settings):
    monkeypatch.setattr(main, "settings", test_settings)
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.state.services = None
