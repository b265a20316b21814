"""
==============================================================================
Main API Router
==============================================================================

Mounts the v1 routers (health, camera, products) under /api/v1.

==============================================================================
"""

from fastapi import APIRouter

from labellense.api.v1 import camera, health, products


API_PREFIX = "/api/v1"

V1_MODULES = (health, camera, products)


def build_api_router(prefix: str = API_PREFIX) -> APIRouter:
    """Combine every v1 module's ``router`` under one prefix."""
    router = APIRouter(prefix=prefix)

    for module in V1_MODULES:
        router.include_router(module.router)

    return router


api_router = build_api_router()
