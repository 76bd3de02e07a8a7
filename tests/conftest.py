"""Pytest configuration and fixtures for keyscope tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator, Iterable

import pytest

from keyscope.config import DetectorConfig
from keyscope.detector import KeyDetector
from keyscope.dictionary import LocaleDictionary
from keyscope.resolver import NamespaceResolver
from keyscope.rewriter import KeyRewriter


class FakeOracle:
    """Dictionary stand-in that knows a fixed set of keys and records lookups."""

    def __init__(self, keys: Iterable[str] = ()):
        self.keys = set(keys)
        self.lookups = []

    def exists(self, key: str, locale=None) -> bool:
        self.lookups.append(key)
        return key in self.keys


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch):
    """Point the config file at a temp location so tests never touch ~/.keyscope."""
    config_file = tmp_path / "keyscope_home" / "config.toml"
    monkeypatch.setattr("keyscope.config.CONFIG_FILE", config_file)
    monkeypatch.setattr("keyscope.config_manager.CONFIG_FILE", config_file)
    return config_file


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_project_path() -> Path:
    """Get path to sample test project."""
    return Path(__file__).parent / "fixtures" / "sample_project"


@pytest.fixture
def sample_project_copy(temp_dir: Path, sample_project_path: Path) -> Path:
    """Writable copy of the sample project."""
    target = temp_dir / "sample_project"
    shutil.copytree(sample_project_path, target)
    return target


@pytest.fixture
def oracle_factory():
    return FakeOracle


@pytest.fixture
def resolver_factory():
    def make(keys: Iterable[str] = (), default_namespace: str = "common") -> NamespaceResolver:
        return NamespaceResolver(FakeOracle(keys), default_namespace=default_namespace)
    return make


@pytest.fixture
def rewriter() -> KeyRewriter:
    return KeyRewriter(enable_key_prefix=True, default_namespace="common")


@pytest.fixture
def sample_dictionary(sample_project_path: Path) -> LocaleDictionary:
    return LocaleDictionary(sample_project_path / "locales")


@pytest.fixture
def detector(sample_dictionary: LocaleDictionary) -> KeyDetector:
    return KeyDetector(DetectorConfig(), sample_dictionary)
