"""
API v1 router setup
Public reads (hours, settings, slots) and JWT-protected booking routes
"""
from fastapi import APIRouter

from tarsit.api.v1 import appointments, business_hours

api_v1_router = APIRouter()

api_v1_router.include_router(appointments.router)
api_v1_router.include_router(business_hours.router)


@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and available endpoint groups."""
    return {
        "version": "1.0",
        "authentication": {
            "public": "Business hours, appointment settings and available slots",
            "bearer": "JWT Bearer token required for booking and managing appointments"
        }
    }
