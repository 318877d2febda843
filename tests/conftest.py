from unittest.mock import Mock

import pytest

from resourceful import Application, Resource
from resourceful.resources import ResourceRegistry


class Blanket(Resource):
    """Resource reached through {resource}/{resources} captures."""

    def show(self, **params):
        return "blanket"


@pytest.fixture
def app():
    """Application without log handlers."""
    return Application(name="test", configure_logs=False)


@pytest.fixture
def registry():
    """Registry with the Default and Blanket resources."""
    registry = ResourceRegistry()
    registry.register(Blanket)
    return registry


@pytest.fixture
def funct():
    """Mock function for testing purposes."""
    return Mock(__name__="Mock", return_value="heyyyy")


@pytest.fixture
def blanket():
    """The Blanket resource class."""
    return Blanket
