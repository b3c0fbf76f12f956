from fastapi import APIRouter
from sqlalchemy import text

from socialnet.database import get_pool_status, get_session_local
from socialnet.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["service"])

SERVICE_NAME = "socialnet-api"
VERSION = "1.0.0"


@router.get("/")
async def root():
    return {"message": "Socialnet API", "version": VERSION}


@router.get("/health")
async def health_check():
    """
    Health check endpoint for load balancers and monitoring.

    Reports ``degraded`` instead of failing when the database cannot be reached.
    """
    database = "ok"
    db = get_session_local()()
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check database query failed: {e}")
        database = "unavailable"
    finally:
        db.close()

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "service": SERVICE_NAME,
        "database": database,
        "pool": get_pool_status(),
    }
