# tests/conftest.py
"""Shared test fixtures.

Fixtures build the intake graph from tests/graphs.py and wire the same
collaborators PrefillSystem.create() wires in production, with an
in-memory repository, a fixed clock, and a notifier that records messages.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from hypothesis import Phase, Verbosity, settings

from prefill.contracts import Severity
from tests.graphs import intake_payload

if TYPE_CHECKING:
    from prefill.core.graph import FormGraph
    from prefill.core.persistence import InMemoryMappingRepository
    from prefill.core.system import PrefillSystem

FIXED_NOW = datetime(2024, 5, 1, 9, 30, tzinfo=UTC)


class RecordingNotifier:
    """Notifier that keeps every (message, severity) it receives."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, Severity]] = []

    def notify(self, message: str, severity: Severity = Severity.SUCCESS) -> None:
        self.messages.append((message, severity))

    @property
    def texts(self) -> list[str]:
        return [message for message, _ in self.messages]


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def intake_graph() -> FormGraph:
    from prefill.core.graph import FormGraph

    return FormGraph.from_payload(intake_payload())


@pytest.fixture
def repository() -> InMemoryMappingRepository:
    from prefill.core.persistence import InMemoryMappingRepository

    return InMemoryMappingRepository()


@pytest.fixture
def system(intake_graph: FormGraph, repository: InMemoryMappingRepository, notifier: RecordingNotifier) -> PrefillSystem:
    from prefill.core.system import PrefillSystem

    return PrefillSystem.create(
        intake_graph,
        repository=repository,
        notifier=notifier,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """configure_logging() replaces root handlers; put the originals back."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
