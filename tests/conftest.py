import pytest

from lexibase import config_manager
from lexibase.database import configure_engine, create_schema, dispose_engine

from tests.helpers.fake_oracle import FakeOracle

_ISOLATED_ENV = (
    "DATABASE_URL",
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "LEXIBASE_LLM_API_KEY",
    "LEXIBASE_LLM_URL",
    "LEXIBASE_SPLIT_CUES",
    "LEXIBASE_ANALYSIS_CONCURRENCY",
    "LEXIBASE_REDUCE_THRESHOLD",
    "LEXIBASE_LOOKUP_REDUCE_MIN",
    "LEXIBASE_LOG_LEVEL",
    "LEXIBASE_TRANSLATION_TARGET",
    "LEXIBASE_LOG_FILE",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch):
    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LEXIBASE_DATABASE_URL", "sqlite+pysqlite:///:memory:")
    config_manager.reset_settings()
    yield
    config_manager.reset_settings()


@pytest.fixture
def database():
    engine = configure_engine("sqlite+pysqlite:///:memory:")
    create_schema()
    yield engine
    dispose_engine()


@pytest.fixture
def fake_oracle() -> FakeOracle:
    return FakeOracle()
