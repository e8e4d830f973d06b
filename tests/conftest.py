"""Shared fixtures for the dashboard tests."""
import os
import time

import pytest


@pytest.fixture
def new_york_tz():
    """Run the test with the process local time zone set to America/New_York."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "America/New_York"
    time.tzset()
    yield
    if previous is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = previous
    time.tzset()
