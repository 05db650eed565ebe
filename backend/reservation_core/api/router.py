"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter

from reservation_core.api.routes import bookings, checkout, holds, seats

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(seats.router)
api_router.include_router(holds.router)
api_router.include_router(checkout.router)
api_router.include_router(bookings.router)
