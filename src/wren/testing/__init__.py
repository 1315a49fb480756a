"""Test utilities for wren applications::

    from wren.testing import TestClient
"""

from wren.testing.client import TestClient, TestResponse

__all__ = ["TestClient", "TestResponse"]
