import pytest


@pytest.fixture(autouse=True)
def run_around_tests():
    """Push the catalogue domain context before each test, pop it after."""
    from catalogue.domain import catalogue

    ctx = catalogue.domain_context()
    ctx.push()

    yield

    ctx.pop()
