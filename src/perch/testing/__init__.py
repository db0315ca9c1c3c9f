"""Test utilities for SSR handles::

    from perch.testing import TestClient
"""

from perch.testing.client import TestClient

__all__ = [
    "TestClient",
]
