"""
V1 API router aggregator: wires all endpoint modules together.
"""

from fastapi import APIRouter

from portal.api.v1.endpoints import (admin, attendance, auth, health,
                                     masterlist, pages, roster, sales)

api_router = APIRouter()

# Sign-in, logout, current caller
api_router.include_router(auth.router)

# Account approval
api_router.include_router(admin.router)

# Read-only aggregates
api_router.include_router(sales.router)
api_router.include_router(attendance.router)
api_router.include_router(masterlist.router)

# Roster and page catalog
api_router.include_router(roster.router)
api_router.include_router(pages.router)

api_router.include_router(health.router)
