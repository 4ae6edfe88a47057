"""Root conftest: shared test configuration."""

import os
from datetime import datetime, timezone

import pytest

# Ensure tests never pick up a real admin token or noisy log format
os.environ.setdefault("ADMIN_TOKEN", "test-admin-token")
os.environ.setdefault("LOG_FORMAT", "text")

FIXED_NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW
