"""Shared fixtures for the decision scorer tests."""

import pytest

from decision_scorer.config import reset_config
from decision_scorer.schema import Criterion, Option


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts and ends with the default configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def criteria() -> list[Criterion]:
    return [
        Criterion(id="price", name="Price", weight=8),
        Criterion(id="quality", name="Quality", weight=6),
        Criterion(id="support", name="Support", weight=4),
    ]


@pytest.fixture
def options() -> list[Option]:
    """Alpha narrowly beats Bravo (128 vs 126 of 180); Charlie trails."""
    return [
        Option(id="alpha", name="Alpha", scores={"price": 9, "quality": 6, "support": 5}),
        Option(id="bravo", name="Bravo", scores={"price": 5, "quality": 9, "support": 8}),
        Option(id="charlie", name="Charlie", scores={"price": 3, "quality": 4, "support": 10}),
    ]
