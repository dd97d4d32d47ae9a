import pytest

from mish.logging import configure_logging


@pytest.fixture(autouse=True)
def quiet_logging():
    configure_logging(level="WARNING")
    yield
    configure_logging(level="WARNING")
