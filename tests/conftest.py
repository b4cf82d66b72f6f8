import pytest

from dictaflow.utils.logging import configure_logging
from tests.builders import ListSink


@pytest.fixture(autouse=True)
def _fresh_logging():
    # CLI tests rebind logging to streams that are closed afterwards
    configure_logging(level="debug", format_type="json")
    yield
    configure_logging(level="debug", format_type="json")


@pytest.fixture
def sink():
    return ListSink()
