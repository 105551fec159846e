import tempfile
from contextlib import suppress
from pathlib import Path
from typing import AsyncIterator, Dict, Iterator, List

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.sql.dml import Insert
from sqlmodel import Session, SQLModel, create_engine

from fitfuel.core import database as core_database
from fitfuel.core.database import get_session
from fitfuel.core.dependencies import get_estimator, get_usda_client
from fitfuel.main import create_app
from fitfuel.schemas import NutritionData

USER = "user-1"
HEADERS = {"X-User-Id": USER}


class FakeUsda:
    """Stands in for UsdaClient; answers from an in-memory table."""

    def __init__(self):
        self.foods: Dict[str, List[NutritionData]] = {}
        self.calls: List[str] = []
        self.error = None

    def add(self, query: str, *records: NutritionData):
        self.foods[query.strip().lower()] = list(records)

    def search_and_parse(self, query: str, limit: int = 5) -> List[NutritionData]:
        self.calls.append(query)
        if self.error is not None:
            raise self.error
        return self.foods.get(query.strip().lower(), [])[:limit]


class FakeEstimator:
    def __init__(self):
        self.records: Dict[str, NutritionData] = {}
        self.calls: List[str] = []
        self.error = None

    def add(self, food_name: str, record: NutritionData):
        self.records[food_name.strip().lower()] = record

    def estimate(self, food_name: str, quantity=None, unit=None) -> NutritionData:
        self.calls.append(food_name)
        if self.error is not None:
            raise self.error
        try:
            return self.records[food_name.strip().lower()]
        except KeyError:
            raise ValueError(f"no estimate for {food_name}")


class CompetingSession(Session):
    """Runs ``competitor`` once, just before this session issues its first INSERT."""

    competitor = None

    def exec(self, statement, **kwargs):
        if isinstance(statement, Insert) and self.competitor is not None:
            competitor, self.competitor = self.competitor, None
            competitor()
        return super().exec(statement, **kwargs)


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_usda() -> FakeUsda:
    return FakeUsda()


@pytest.fixture
def fake_estimator() -> FakeEstimator:
    return FakeEstimator()


@pytest.fixture
def engine():
    # Use a fresh SQLite DB file in a temp dir per test for isolation
    tmp = tempfile.TemporaryDirectory()
    db_path = Path(tmp.name) / "test.db"
    eng = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})

    from fitfuel.models import meals, nutrition, tracking, workouts  # noqa: F401
    SQLModel.metadata.create_all(eng)
    try:
        yield eng
    finally:
        with suppress(Exception):
            eng.dispose()
        tmp.cleanup()


@pytest.fixture
def session(engine) -> Iterator[Session]:
    with Session(engine) as s:
        yield s


@pytest.fixture
def competing_session(engine) -> Iterator[CompetingSession]:
    with CompetingSession(engine) as s:
        yield s


@pytest.fixture(scope="function")
def test_app(monkeypatch, engine, fake_usda, fake_estimator) -> Iterator[FastAPI]:
    def _override_get_session():
        with Session(engine) as session:
            yield session

    # patch global engine/init_db so startup hooks operate on the test database
    monkeypatch.setattr(core_database, "engine", engine, raising=False)

    def _init_db():
        SQLModel.metadata.create_all(engine)

    monkeypatch.setattr(core_database, "init_db", _init_db, raising=False)

    app = create_app()
    app.dependency_overrides[get_session] = _override_get_session
    app.dependency_overrides[get_usda_client] = lambda: fake_usda
    app.dependency_overrides[get_estimator] = lambda: fake_estimator

    try:
        yield app
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
async def client(test_app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def db_session(test_app: FastAPI):
    override = test_app.dependency_overrides[get_session]
    generator = override()
    session = next(generator)
    try:
        yield session
    finally:
        with suppress(StopIteration):
            next(generator)


@pytest.fixture
def headers() -> Dict[str, str]:
    return dict(HEADERS)
