"""
API package for the BOM dependency rules backend.

This package aggregates all API routers to be included in the FastAPI
application. The API is versioned under ``/api/v1``.
"""

from fastapi import APIRouter
from .v1.dependency_rules import router as dependency_rules_router
from .v1.health import router as health_router

api_router = APIRouter()
api_router.include_router(dependency_rules_router)
api_router.include_router(health_router)
