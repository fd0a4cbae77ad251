import os
import random

import pytest

os.environ["FLASK_ENV"] = "testing"

from matchday import create_app
from matchday.core.types import Team
from matchday.events import event_bus
from matchday.extensions import db as _db


@pytest.fixture(scope="session")
def app():
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def tables(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
        yield
        _db.session.remove()
        _db.drop_all()
    event_bus.clear()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def rng():
    return random.Random(1234)


def make_teams(count, owners=None):
    """Engine teams T1..Tn; ``owners`` cycles through the given owner names."""
    owners = owners or [f"owner{i}" for i in range(1, count + 1)]
    return [
        Team(name=f"T{i}", owner_name=owners[(i - 1) % len(owners)], id=i)
        for i in range(1, count + 1)
    ]
