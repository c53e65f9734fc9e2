"""Fixtures shared by the context tests."""

import pytest

from ctxengine.config import ContextEngineSettings
from ctxengine.context.engine import ContextEngine
from ctxengine.context.history import SessionHistory
from tests.context.mock_providers import (
    CONFIG_SOURCE,
    MemoryFileReader,
    MockLanguageServer,
    MockSearchIndex,
)


@pytest.fixture
def language_server() -> MockLanguageServer:
    return MockLanguageServer()


@pytest.fixture
def search_index() -> MockSearchIndex:
    return MockSearchIndex()


@pytest.fixture
def file_reader() -> MemoryFileReader:
    return MemoryFileReader({"src/config.ts": CONFIG_SOURCE})


@pytest.fixture
def engine_settings() -> ContextEngineSettings:
    return ContextEngineSettings()


@pytest.fixture
def engine(
    language_server: MockLanguageServer,
    search_index: MockSearchIndex,
    file_reader: MemoryFileReader,
    engine_settings: ContextEngineSettings,
) -> ContextEngine:
    return ContextEngine(
        language_server,
        search_index,
        file_reader=file_reader,
        settings=engine_settings,
        history=SessionHistory(),
    )
