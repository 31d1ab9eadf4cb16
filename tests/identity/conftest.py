import pytest


@pytest.fixture(autouse=True)
def run_around_tests():
    """Push the identity domain context before each test, pop it after."""
    from identity.domain import identity

    ctx = identity.domain_context()
    ctx.push()

    yield

    ctx.pop()
