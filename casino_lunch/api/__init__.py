"""
API routes and endpoints.
"""

from fastapi import APIRouter
from .v1 import auth, calendar, pending, reservations

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(calendar.router, prefix="/calendar", tags=["calendar"])
api_router.include_router(pending.router, prefix="/pending", tags=["pending"])
api_router.include_router(reservations.router, prefix="/reservations", tags=["reservations"])
