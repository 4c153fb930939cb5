"""
BTSim Test Configuration

Pytest fixtures and shared factories.
"""

import random
from datetime import datetime, timezone

import pytest

from btsim.models.context import Activity, Connection, Site, UserContext
from btsim.models.detection import DetectionInput, FormField, UserBehavior


def ts(year, month, day, hour=12, minute=0, second=0, ms=0) -> int:
    """UTC wall-clock time as epoch milliseconds."""
    moment = datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000) + ms


def create_test_context(site=Site.GITHUB, activities=0, connections=0, **kwargs) -> UserContext:
    """Create a test context with the requested number of activities/connections."""
    base = ts(2024, 1, 3, 14)
    defaults = {
        'site': site,
        'recent_activity': [
            Activity(type="post", content=f"update {i}", timestamp=base + i * 60000)
            for i in range(activities)
        ],
        'connections': [Connection(name=f"Contact {i}") for i in range(connections)],
        'timestamp': base,
    }
    defaults.update(kwargs)
    return UserContext(**defaults)


def create_test_input(**kwargs) -> DetectionInput:
    """Create a detection input with a benign HTTPS page by default."""
    defaults = {
        'form_fields': [],
        'url': "https://github.com/login",
        'page_title': "Sign in",
        'page_content': "",
        'user_behavior': UserBehavior(time_on_page=30000, mouse_movements=40, keystrokes=5),
    }
    defaults.update(kwargs)
    return DetectionInput(**defaults)


PASSWORD_FIELD = FormField(type="password", name="password", is_password=True)
EMAIL_FIELD = FormField(type="email", name="email")


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return random.Random(1234)
