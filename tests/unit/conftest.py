"""Unit test configuration.

Unit tests should be fast and isolated - no Redis, no PostgreSQL.
"""

import pytest


# Mark all tests in this directory as unit tests
pytestmark = pytest.mark.unit
