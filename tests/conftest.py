"""Pytest configuration and fixtures."""

from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta

import pytest

from scriptsync.config import ScriptSyncSettings, reset_settings, set_settings
from scriptsync.events import Event, EventBus, Signal
from scriptsync.models.element import ScriptElement, ScriptElementType
from scriptsync.models.screenplay import ScreenplayDocument
from scriptsync.storage.connection import DatabaseConnection
from scriptsync.storage.kv_store import InMemoryKeyValueStore
from scriptsync.storage.scene_store import SQLiteSceneStore

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")


@pytest.fixture(autouse=True)
def cleanup_singletons():
    """Ensure the settings singleton does not leak between tests."""
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def isolated_test_environment(tmp_path, monkeypatch):
    """Point settings at a throwaway database for every test."""
    db_path = tmp_path / "test_scriptsync.db"
    monkeypatch.setenv("SCRIPTSYNC_DATABASE_PATH", str(db_path))
    monkeypatch.delenv("SCRIPTSYNC_CONFIG", raising=False)
    set_settings(ScriptSyncSettings(database_path=db_path))
    yield


@pytest.fixture
def db_connection(tmp_path) -> Iterator[DatabaseConnection]:
    """Database connection on a temporary file."""
    connection = DatabaseConnection(tmp_path / "scenes.db")
    yield connection
    connection.close()


@pytest.fixture
def scene_store(db_connection) -> SQLiteSceneStore:
    """Shots scene store with the full column set."""
    return SQLiteSceneStore(db_connection, table="shots_scenes")


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorded_events(event_bus) -> list[Event]:
    """Every event emitted on ``event_bus`` during the test."""
    events: list[Event] = []
    for signal in Signal:
        event_bus.subscribe(signal, events.append)
    return events


class AdvancingClock:
    """Clock returning a strictly increasing time on every call."""

    def __init__(self, start: datetime = T0, step: timedelta = timedelta(minutes=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


@pytest.fixture
def clock() -> AdvancingClock:
    return AdvancingClock()


@pytest.fixture
def make_document() -> Callable[..., ScreenplayDocument]:
    """Build documents from ``(number, heading, body...)`` scene tuples.

    Each body entry becomes an action paragraph.
    """

    def build(*scenes: tuple[str | None, str, ...], title: str = "Test Script"):
        elements: list[ScriptElement] = []
        for number, heading, *body in scenes:
            elements.append(
                ScriptElement(
                    type=ScriptElementType.SCENE_HEADING,
                    text=heading,
                    scene_number=number,
                )
            )
            for text in body:
                elements.append(ScriptElement(type=ScriptElementType.ACTION, text=text))
        return ScreenplayDocument(title=title, elements=elements)

    return build


@pytest.fixture
def sample_fdx() -> bytes:
    """Small Final Draft document with a title page and three scenes."""
    return b"""<?xml version="1.0" encoding="UTF-8" standalone="no" ?>
<FinalDraft DocumentType="Script" Template="No" Version="5">
  <Content>
    <Paragraph Number="1" Type="Scene Heading">
      <SceneProperties Length="1 2/8" Page="1" Title=""/>
      <Text>INT. KITCHEN - DAY</Text>
    </Paragraph>
    <Paragraph Type="Action">
      <Text>Sarah pours coffee.</Text>
    </Paragraph>
    <Paragraph Type="Character">
      <Text>SARAH (V.O.)</Text>
    </Paragraph>
    <Paragraph Type="Dialogue">
      <Text>Morning already?</Text>
    </Paragraph>
    <Paragraph Number="2" Type="Scene Heading">
      <SceneProperties Length="4/8" Page="2" Title=""/>
      <Text>EXT. ALLEY - NIGHT</Text>
    </Paragraph>
    <Paragraph Type="Action">
      <Text>Rain hammers the dumpsters.</Text>
    </Paragraph>
    <Paragraph Number="3" Type="Scene Heading">
      <Text>INT./EXT. CAR - CONTINUOUS</Text>
    </Paragraph>
    <Paragraph Type="Action">
      <Text>The engine coughs.</Text>
    </Paragraph>
  </Content>
  <TitlePage>
    <Title>Coffee Run</Title>
    <WrittenBy>Jo Writer</WrittenBy>
  </TitlePage>
</FinalDraft>
"""
