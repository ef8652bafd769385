import pytest

from docseek.search.client import SearchEngineClient
from fake_engine import FakeEngine, make_client, make_source


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine([make_source(i) for i in range(25)])


@pytest.fixture
def client(engine: FakeEngine) -> SearchEngineClient:
    return make_client(engine.handler)
