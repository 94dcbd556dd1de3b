"""Unified API client.

Import ``ApiClient``/``create_api_client`` from here; callers never need to
know whether calls go through the proxy server or straight to a vendor.
"""

from .client import ApiClient, create_api_client

__all__ = ["ApiClient", "create_api_client"]
