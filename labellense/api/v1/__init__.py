"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- camera: Camera start/stop, scan, latest frame
- products: Product metadata lookup

==============================================================================
"""

from . import health, camera, products

__all__ = ["health", "camera", "products"]
