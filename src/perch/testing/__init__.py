"""Test utilities for perch applications.

Provides an in-process ASGI test client and page/redirect assertions::

    from perch.testing import TestClient, assert_page, assert_redirect
"""

from perch.testing.assertions import assert_page, assert_redirect, page_object
from perch.testing.client import TestClient

__all__ = ["TestClient", "assert_page", "assert_redirect", "page_object"]
