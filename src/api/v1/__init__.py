"""
API v1 routes.
"""

from fastapi import APIRouter

from src.api.v1 import entries, export, roles

router = APIRouter()

router.include_router(entries.router, prefix="/entries", tags=["Entries"])
router.include_router(roles.router, prefix="/roles", tags=["Roles"])
router.include_router(export.router, tags=["Export"])
