import pytest
from loguru import logger

from conditionalmarkets.core.markets import load_markets


@pytest.fixture
def log_messages():
    """Capture loguru records emitted by the package."""
    messages = []
    logger.enable("conditionalmarkets")
    sink_id = logger.add(lambda msg: messages.append(msg.record), level="DEBUG")
    yield messages
    logger.remove(sink_id)
    logger.disable("conditionalmarkets")


@pytest.fixture
def binary_system():
    """One categorical market with two outcomes."""
    return load_markets([
        {"key": "merge", "title": "Will the PR merge?",
         "outcomes": [{"title": "Yes", "short": "Y"}, {"title": "No", "short": "N"}]},
    ])


@pytest.fixture
def two_market_system():
    """Markets A and B, two outcomes each, four positions."""
    return load_markets([
        {"key": "A", "outcomes": [{"title": "A0"}, {"title": "A1"}]},
        {"key": "B", "outcomes": [{"title": "B0"}, {"title": "B1"}]},
    ])


@pytest.fixture
def scalar_system():
    return load_markets([
        {"key": "gas", "title": "Gas price", "unit": "gwei",
         "lower_bound": 0, "upper_bound": 100,
         "outcomes": [{"title": "Long"}, {"title": "Short"}]},
    ])
