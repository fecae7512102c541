"""Health check endpoint"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text
from sqlalchemy.orm import Session
import logging

from app.api.dependencies import get_provider_registry, get_response_cache
from app.database.session import get_db
from app.llm.factory import ProviderRegistry
from app.schemas.response import HealthResponse
from app.services.cache import ResponseCache

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health_check(
    response: Response,
    db: Session = Depends(get_db),
    cache: ResponseCache = Depends(get_response_cache),
    registry: ProviderRegistry = Depends(get_provider_registry)
):
    """
    Health check endpoint
    Checks connectivity to:
    - Database
    - Redis cache (optional)
    and lists the registered AI providers
    """
    health_status = {
        "status": "healthy",
        "dependencies": {}
    }

    # Check database
    try:
        db.execute(text("SELECT 1"))
        health_status["dependencies"]["database"] = "connected"
    except Exception as e:
        health_status["dependencies"]["database"] = f"error: {str(e)}"
        health_status["status"] = "unhealthy"
        logger.error(f"Database health check failed: {str(e)}")

    # Check cache (optional - the app works without it)
    cache_status = await cache.ping()
    health_status["dependencies"]["cache"] = cache_status
    if cache_status.startswith("error"):
        logger.warning(f"Cache health check failed: {cache_status}")

    health_status["dependencies"]["ai_providers"] = registry.names or "none configured"

    # Set HTTP status code
    if health_status["status"] == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(**health_status)
