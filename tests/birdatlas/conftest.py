"""Shared fixtures for birdatlas tests."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from birdatlas.actor.interface import Actor
from birdatlas.birds.models import BirdRecord, LocationEntry
from birdatlas.cache.query_cache import QueryCache
from birdatlas.gate.admin_gate import AdminGate
from birdatlas.gate.models import Identity
from birdatlas.sync.service import BirdAtlasService
from birdatlas.sync.session import Session
from birdatlas.system.path_resolver import PathResolver


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def query_cache(clock: FakeClock) -> QueryCache:
    return QueryCache(stale_time=5.0, clock=clock)


@pytest.fixture
def mock_actor() -> AsyncMock:
    """Actor whose every remote method is an AsyncMock."""
    actor = AsyncMock(spec=Actor)
    actor.is_caller_admin.return_value = False
    actor.can_caller_modify_data.return_value = False
    actor.get_all_bird_data.return_value = []
    actor.bird_exists.return_value = False
    return actor


@pytest.fixture
def identity() -> Identity:
    return Identity(principal="aaaaa-aa")


@pytest.fixture
def session(mock_actor: AsyncMock, query_cache: QueryCache) -> Session:
    return Session(lambda identity: mock_actor, cache=query_cache, gate=AdminGate())


@pytest.fixture
def service(session: Session) -> BirdAtlasService:
    return BirdAtlasService(session)


@pytest.fixture
def owl() -> BirdRecord:
    return BirdRecord(
        id=2,
        name="بومة",
        arabic_name="بومة",
        english_name="Desert Eagle Owl",
        scientific_name="Bubo ascalaphus",
        description="Large owl of rocky deserts",
        sub_images=["images/1_owl.png", "images/2_owl.png"],
        audio_file="audio/1_owl.mp3",
        locations=[
            LocationEntry(
                latitude=24.25,
                longitude=55.79,
                location="Jebel Hafeet",
                governorate="Al Buraimi",
                mountain_name="Hafeet",
            ),
            LocationEntry(latitude=0.0, longitude=0.0, location="Unknown wadi"),
        ],
    )


@pytest.fixture
def hoopoe() -> BirdRecord:
    return BirdRecord(id=1, name="هدهد", arabic_name="هدهد", english_name="Hoopoe")


@pytest.fixture
def birds(hoopoe: BirdRecord, owl: BirdRecord) -> list[BirdRecord]:
    return [hoopoe, owl]


@pytest.fixture
def path_resolver(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> PathResolver:
    """PathResolver rooted in a temporary data directory."""
    monkeypatch.setenv("BIRDATLAS_DATA", str(tmp_path / "data"))
    monkeypatch.delenv("BIRDATLAS_CONFIG", raising=False)
    return PathResolver()
