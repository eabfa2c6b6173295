"""Pytest fixtures for incident-sync tests."""

from datetime import datetime, timedelta, timezone
from typing import Any, Generator, Optional

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from incident_sync.db import create_db_and_tables, make_session_factory
from incident_sync.domain import SQLModelSyncStore
from incident_sync.models import ConnectorType, DataSource
from incident_sync.sync.services import HTTPClientError


class FakeHTTPClient:
    """Stands in for HTTPClient: canned JSON (or an exception) per URL."""

    def __init__(self, responses: Optional[dict[str, Any]] = None):
        self.responses = dict(responses or {})
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def get(self, endpoint: str, params=None, headers=None) -> Any:
        self.calls.append({"url": endpoint, "params": params, "headers": headers})
        if endpoint not in self.responses:
            raise HTTPClientError(f"Request failed: no route for {endpoint}")
        response = self.responses[endpoint]
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


def make_data_source(
    name: str = "Acme Status",
    type: str = ConnectorType.STATUSPAGE.value,
    base_url: str = "https://status.acme.test",
    **kwargs: Any,
) -> DataSource:
    """Build an unsaved DataSource with sensible defaults."""
    return DataSource(name=name, type=type, base_url=base_url, **kwargs)


def statuspage_incident(
    incident_id: str = "inc-1",
    name: str = "Elevated API errors",
    status: str = "investigating",
    impact: str = "minor",
    **overrides: Any,
) -> dict[str, Any]:
    """A Statuspage v2 incident object."""
    payload = {
        "id": incident_id,
        "name": name,
        "status": status,
        "impact": impact,
        "created_at": "2024-03-01T10:00:00.000Z",
        "updated_at": "2024-03-01T10:30:00.000Z",
        "monitoring_at": None,
        "resolved_at": None,
        "shortlink": f"https://stspg.io/{incident_id}",
        "components": [{"id": "cmp-1", "name": "API"}],
        "incident_updates": [
            {
                "id": f"{incident_id}-u2",
                "status": status,
                "body": "We are looking into elevated error rates.",
                "created_at": "2024-03-01T10:30:00.000Z",
            },
            {
                "id": f"{incident_id}-u1",
                "status": "investigating",
                "body": "Investigating reports of errors.",
                "created_at": "2024-03-01T10:00:00.000Z",
            },
        ],
    }
    payload.update(overrides)
    return payload


def statuspage_components() -> dict[str, Any]:
    return {
        "components": [
            {"id": "grp-1", "name": "Core", "group": True, "status": "operational", "position": 1},
            {
                "id": "cmp-1",
                "name": "API",
                "status": "degraded_performance",
                "position": 2,
                "group_id": "grp-1",
                "showcase": True,
            },
        ]
    }


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine with every table created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine):
    return make_session_factory(engine)


@pytest.fixture
def session(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(session_factory) -> SQLModelSyncStore:
    return SQLModelSyncStore(session_factory)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def http_client() -> FakeHTTPClient:
    return FakeHTTPClient()
