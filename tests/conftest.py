"""
Shared fixtures for the debt collector test suite.

Provides test fixtures for:
- Temporary repository creation
- Debt item construction
- Deterministic local embeddings
- Scripted language-model backends
"""

import logging
from pathlib import Path

import pytest

from debt_collector.backends.mock import MockBackend
from debt_collector.backends.router import BackendRouter
from debt_collector.collector_logging import LOGGER_NAME
from debt_collector.embeddings.hashing import HashingEmbedder
from debt_collector.models import DebtItem, DebtType, make_item_id
from debt_collector.performance.metrics import PerformanceMetricsCollector
from debt_collector.rag.similarity import SimilarityIndex

FULL_RESPONSE = """EXPLANATION: Hardcoded credentials bypass secret rotation.
SEVERITY: 5
PRIORITY: HIGH
IMPACT: Credential leak exposes production data.
FIX: 2-4 hours
RECOMMENDATION: Move the secret into the vault client.
CONFIDENCE: 0.9"""


# ---------------------------------------------------------------------------
# Temporary repository fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_repo(tmp_path_factory) -> Path:
    """Create a small repository with marker comments in several files."""
    repo_path = tmp_path_factory.mktemp("sample_repo")

    (repo_path / "app.py").write_text(
        "def run():\n"
        "    # TODO: add retries\n"
        "    # FIXME: critical security issue in token check\n"
        "    return 1\n"
    )

    (repo_path / "lib").mkdir()
    (repo_path / "lib" / "util.js").write_text(
        "// HACK: works around broken date parsing\n"
        "function f() {}\n"
        "// XXX remove after migration\n"
    )

    # Not a source extension
    (repo_path / "notes.md").write_text("TODO: write docs\n")

    # Excluded and hidden directories
    (repo_path / "node_modules").mkdir()
    (repo_path / "node_modules" / "dep.js").write_text("// TODO: vendored\n")
    (repo_path / ".hidden").mkdir()
    (repo_path / ".hidden" / "secret.py").write_text("# TODO: hidden\n")

    return repo_path


@pytest.fixture()
def empty_repo(tmp_path_factory) -> Path:
    """Create a repository without any marker comments."""
    repo_path = tmp_path_factory.mktemp("empty_repo")
    (repo_path / "clean.py").write_text("def ok():\n    return True\n")
    return repo_path


# ---------------------------------------------------------------------------
# Item fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_item():
    """Factory for DebtItems with sensible defaults."""

    def _make(
        message: str = "refactor this",
        file_path: str = "src/app.py",
        line_number: int = 1,
        debt_type: DebtType = DebtType.TODO,
        severity: int = 2,
        file_importance: int = 3,
        frequency: int = 1,
        risk: float = 0.0,
    ) -> DebtItem:
        return DebtItem(
            id=make_item_id(file_path, line_number, debt_type),
            file_path=file_path,
            line_number=line_number,
            type=debt_type,
            message=message,
            severity=severity,
            file_importance=file_importance,
            frequency=frequency,
            risk=risk,
        )

    return _make


# ---------------------------------------------------------------------------
# Embedding / backend fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def hashing_embedder() -> HashingEmbedder:
    return HashingEmbedder(dimensions=64)


@pytest.fixture()
def similarity_index(hashing_embedder) -> SimilarityIndex:
    return SimilarityIndex(hashing_embedder)


@pytest.fixture()
def full_response() -> str:
    """A well-formed response carrying every label."""
    return FULL_RESPONSE


@pytest.fixture()
def mock_router():
    """Factory for a router with one scripted primary backend."""

    def _make(*script, name: str = "mock") -> tuple[BackendRouter, MockBackend]:
        backend = MockBackend(name=name, script=script)
        router = BackendRouter(primary=name)
        router.register(backend)
        return router, backend

    return _make


@pytest.fixture(autouse=True)
def reset_metrics():
    """The metrics collector is a process singleton; isolate each test."""
    PerformanceMetricsCollector().clear()
    yield
    PerformanceMetricsCollector().clear()


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo any handlers installed by setup_logging during a test."""
    logger = logging.getLogger(LOGGER_NAME)
    handlers = logger.handlers[:]
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
