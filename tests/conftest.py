import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Pin the environment so settings and log levels resolve to their test
    values, and initialize every domain once for the session.
    """
    os.environ["ENV"] = session.config.option.env
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from catalogue.domain import catalogue
    from identity.domain import identity
    from ordering.domain import ordering

    identity.init()
    catalogue.init()
    ordering.init()

    from shared.settings import get_settings

    get_settings.cache_clear()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        # Get the test file path relative to the tests directory
        test_path = Path(item.fspath)

        # Mark tests based on their directory
        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def backend():
    """A fresh FakeBackend installed as the active backend for every test."""
    from shared.backend import FakeBackend, reset_backend, set_backend

    fake = FakeBackend()
    set_backend(fake)

    yield fake

    reset_backend()

    from ordering.checkout.store import wizards

    wizards.clear()
