"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It sets the TESTING environment variable so settings never load a local
.env file during tests.
"""

import os
from unittest.mock import Mock

import pytest

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"
os.environ.setdefault("APP_ENV", "testing")


@pytest.fixture
def frozen_clock() -> Mock:
    """Clock stub returning a fixed UNIX time; tests move it by hand."""
    return Mock(return_value=1000.0)
