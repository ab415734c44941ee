from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session
import time
import logging

from ....core.cache import cache
from ....core.database import get_db
from ....api.deps import get_current_admin
from ....models.user import User
from ....utils.timezone import get_timezone_info

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
async def get_basic_health():
    """Liveness probe, no authentication required"""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "service": "campus-portal-api"
    }


@router.get("/system")
async def get_system_health(
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    health_status = {
        "timestamp": time.time(),
        "overall_status": "healthy",
        "services": {},
        "timezone": get_timezone_info(),
    }

    try:
        start_time = time.time()
        db.execute(text("SELECT 1"))
        health_status["services"]["database"] = {
            "status": "healthy",
            "response_time": round((time.time() - start_time) * 1000, 2)
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status["services"]["database"] = {"status": "error", "error": str(e)}
        health_status["overall_status"] = "unhealthy"

    cache_ok = await cache.ahealth_check()
    health_status["services"]["cache"] = {"status": "healthy" if cache_ok else "unavailable"}
    if not cache_ok and health_status["overall_status"] == "healthy":
        health_status["overall_status"] = "degraded"

    return health_status
