from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List
import logging
import uvicorn

from app.core.config import settings
from app.core.exceptions import AnalyticsError
from app.core.logging_config import setup_logging
from app.api.admin import admin_routers
from app.database import init_database, close_database, create_tables
from app.utils.response_assembler import error_payload, error_response

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging()
    logger.info("Starting Collaboration Analytics Backend...")

    try:
        await init_database()
        if settings.DATABASE_CREATE_TABLES:
            await create_tables()
        logger.info("✅ Database ready")
    except Exception as e:
        logger.error(f"❌ Database initialization failed: {e}")
        logger.warning("Starting without a database - analytics endpoints will return errors")

    yield

    # Shutdown
    logger.info("Shutting down Collaboration Analytics Backend...")
    try:
        await close_database()
    except Exception as e:
        logger.error(f"Cleanup failed: {e}")


app = FastAPI(
    title="Collaboration Analytics Backend",
    description="On-demand reporting for brand/influencer collaborations",
    version="1.0.0",
    lifespan=lifespan
)


@app.exception_handler(AnalyticsError)
async def analytics_exception_handler(request, exc: AnalyticsError):
    logger.error(f"❌ {type(exc).__name__} on {request.url.path}: {exc.message}")
    return error_response(exc)


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content=error_payload(exc), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    logger.error(f"❌ VALIDATION ERROR on {request.url}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": "Validation Error",
            "message": "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
            ),
        }
    )


def get_allowed_origins() -> List[str]:
    """Comma-separated CORS_ORIGINS, '*' allows everything"""
    return [origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()] or ["*"]


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

for router in admin_routers:
    app.include_router(router)


@app.get("/health")
async def health_check():
    return {
        "success": True,
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG
    )
