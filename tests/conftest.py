import pytest

from tests.helpers import entity


@pytest.fixture
def argentina():
    return entity("Q414", "Argentina", "country", 400)


@pytest.fixture
def barcelona():
    return entity("Q7156", "Barcelona", "club", 9999)
