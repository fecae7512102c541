"""FastAPI application entry point"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from app.api.endpoints import auth, chat, health
from app.api.endpoints import settings as settings_router
from app.api.dependencies import get_provider_registry, get_response_cache
from app.database.session import engine
from app.database.base import Base
from app.config import settings
from app.utils.logger import setup_logging
from app.exceptions import ChatbotException

from app import models  # noqa: F401  registers tables on Base.metadata

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server error, please try again later"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager
    - Startup: Initialize database tables, log provider order
    - Shutdown: Close the cache connection
    """
    # Startup
    logger.info(f"Starting {settings.APP_NAME}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    registry = get_provider_registry()
    logger.info("=" * 60)
    logger.info(f"🤖 AI PROVIDERS: {', '.join(registry.names) or 'NONE'}")
    logger.info(f"⏱️ Provider timeout: {settings.PROVIDER_TIMEOUT_SECONDS}s")
    logger.info("=" * 60)

    # Create database tables
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created/verified")
    except Exception as e:
        logger.error(f"Database initialization error: {str(e)}")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}")

    cache = get_response_cache()
    if cache.client is not None:
        try:
            await cache.client.aclose()
        except Exception as e:
            logger.error(f"Cache shutdown error: {str(e)}")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Chat backend for a wellness companion with multi-provider AI fallback",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix="/api", tags=["authentication"])
app.include_router(chat.router, prefix="/api", tags=["chat"])
app.include_router(settings_router.router, prefix="/api", tags=["settings"])


# Exception handlers
@app.exception_handler(ChatbotException)
async def chatbot_exception_handler(request: Request, exc: ChatbotException):
    """Handle custom chatbot exceptions"""
    if exc.status_code >= 500:
        # Internal detail stays in the logs
        logger.error(f"Chatbot exception on {request.url.path}: {exc.__class__.__name__}: {str(exc)}")
        content = {"error": SERVER_ERROR_MESSAGE, "code": "SERVER_ERROR"}
    else:
        logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
        content = {"error": exc.message, "code": exc.code}
        if exc.details is not None:
            content["details"] = exc.details

    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report request validation failures as 400 VALIDATION_ERROR"""
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")),
            "msg": error.get("msg", "")
        }
        for error in exc.errors()
    ]
    logger.warning(f"Validation failed on {request.url.path}: {details}")
    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation failed",
            "code": "VALIDATION_ERROR",
            "details": details
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all other exceptions"""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": SERVER_ERROR_MESSAGE,
            "code": "SERVER_ERROR"
        }
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": f"{settings.APP_NAME} API",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
        "docs": "/docs" if settings.DEBUG else "disabled"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
