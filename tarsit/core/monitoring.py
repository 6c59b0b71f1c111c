"""Liveness and dependency checks for the booking API"""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from tarsit.config.database import get_db
from tarsit.config.redis import get_redis

SERVICE_NAME = "tarsit-booking-api"

health_router = APIRouter()


@health_router.get("")
async def health_check():
    """Process is up; no dependencies touched"""
    return {"status": "healthy", "service": SERVICE_NAME}


@health_router.get("/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Check the appointment database and the Redis broker that carries
    appointment emails. A broker outage only degrades the service:
    bookings still work, their emails are dropped.
    """
    checks = {
        "service": SERVICE_NAME,
        "database": "unknown",
        "email_broker": "unknown",
    }

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        checks["database"] = f"unhealthy: {str(e)}"

    try:
        redis_client = await get_redis()
        await redis_client.ping()
        await redis_client.aclose()
        checks["email_broker"] = "healthy"
    except Exception as e:
        checks["email_broker"] = f"unhealthy: {str(e)}"

    if checks["database"] != "healthy":
        checks["status"] = "unhealthy"
    elif checks["email_broker"] != "healthy":
        checks["status"] = "degraded"
    else:
        checks["status"] = "healthy"

    return checks
