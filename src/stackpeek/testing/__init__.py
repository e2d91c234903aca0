"""Test utilities for stackpeek applications.

Provides an in-process ASGI test client and assertions for the
inspection pages::

    from stackpeek.testing import TestClient, assert_hidden
"""

from stackpeek.testing.assertions import assert_hidden, assert_masked, assert_page
from stackpeek.testing.client import TestClient

__all__ = ["TestClient", "assert_hidden", "assert_masked", "assert_page"]
