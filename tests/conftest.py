from pathlib import Path

import pytest
import yaml

from spec_portal.catalog.cache import SpecCache
from spec_portal.catalog.discovery import SpecCatalog, read_spec_file

FIXTURES = Path(__file__).parent / "fixtures"
CONTENT = FIXTURES / "content"


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingReader:
    """Spec file reader that records every file it reads."""

    def __init__(self):
        self.calls: list[Path] = []

    async def __call__(self, path: Path) -> str:
        self.calls.append(path)
        return await read_spec_file(path)


def minimal_spec(title: str, version: str = "1.0.0", paths: dict | None = None) -> dict:
    return {
        "openapi": "3.0.3",
        "info": {"title": title, "version": version},
        "paths": paths or {"/ping": {"get": {"operationId": "ping", "summary": "Ping"}}},
    }


def write_spec(root: Path, relative: str, content: dict | str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    text = content if isinstance(content, str) else yaml.safe_dump(content, sort_keys=False)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def reader():
    return CountingReader()


@pytest.fixture
def make_catalog(clock, reader):
    def _make(root: Path) -> SpecCatalog:
        return SpecCatalog(root, cache=SpecCache(), ttl=300, clock=clock, reader=reader)

    return _make


@pytest.fixture
def fixture_catalog(make_catalog):
    return make_catalog(CONTENT)
