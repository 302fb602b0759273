"""
FastAPI application entry point - EyeMate
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from eyemate.core.config import get_settings
from eyemate.core.database import create_tables, test_connection, get_db_info
from eyemate.core.scheduler import ReminderScheduler
from eyemate.core.security import SecurityHeaders
from eyemate.api import api_router
import logging

logging.basicConfig(
    level=get_settings().LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown"""
    logger.info("🚀 Starting EyeMate API...")
    logger.info(f"🌍 Environment: {settings.ENVIRONMENT}")
    logger.info(f"🔑 Debug: {settings.DEBUG}")
    if settings.is_production and settings.SECRET_KEY == "change-me":
        logger.warning("⚠️ SECRET_KEY is still the default value")

    if test_connection():
        logger.info("✅ Database connection OK")

        db_info = get_db_info()
        if db_info and "mysql_version" in db_info:
            logger.info(f"📊 MySQL {db_info['mysql_version']} - DB: {db_info['database_name']}")

        try:
            create_tables()
            logger.info("✅ Database schema verified")
        except Exception as e:
            logger.error(f"❌ Error verifying schema: {e}")
    else:
        logger.error("❌ Database connection failed")
        logger.warning("⚠️ The application will keep running without a database")

    scheduler = None
    if settings.SCHEDULER_ENABLED:
        scheduler = ReminderScheduler()
        scheduler.start()
    else:
        logger.info("⏸️ Reminder scheduler disabled")
    app.state.scheduler = scheduler

    logger.info("🎯 EyeMate API ready")
    yield

    logger.info("🛑 Shutting down EyeMate API...")
    if scheduler is not None:
        scheduler.stop()


def create_application() -> FastAPI:
    """Build the FastAPI application"""

    app_config = {
        "title": settings.PROJECT_NAME,
        "description": """
## EyeMate API

REST backend for the EyeMate glaucoma patient app.

### Features:
- 👁️ IOP measurements and analytics
- 💊 Eye-drop reminders and dose tracking
- 📅 Appointment reminders and reschedule requests
- 🔔 Web push notifications
- 📄 Medical document storage
        """,
        "version": settings.VERSION,
        "lifespan": lifespan,
    }

    app = FastAPI(**app_config)

    setup_middlewares(app)
    setup_routes(app)

    return app


def setup_middlewares(app: FastAPI):
    """Register middlewares"""

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["*"],
    )
    logger.info(f"🌐 CORS origins: {settings.CORS_ORIGINS}")

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SecurityHeaders.get_security_headers().items():
            response.headers[name] = value
        return response


def setup_routes(app: FastAPI):
    """Register routes"""

    @app.get("/")
    async def root():
        return {
            "message": "👁️ EyeMate API",
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "documentation": "/docs",
            "health": "/health",
            "api": "/api"
        }

    @app.get("/health")
    async def health_check():
        """Health check including database and scheduler state"""
        db_status = "connected" if test_connection() else "disconnected"
        scheduler = getattr(app.state, "scheduler", None)

        health_status = {
            "status": "healthy" if db_status == "connected" else "degraded",
            "service": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "database": {
                "status": db_status
            },
            "scheduler": "running" if scheduler is not None and scheduler.running else "stopped",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        if settings.DEBUG:
            db_info = get_db_info()
            if db_info:
                health_status["database"].update(db_info)

        return health_status

    app.include_router(
        api_router,
        prefix="/api"
    )

    logger.info("🛣️ Routes configured")


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn_config = {
        "app": "eyemate.main:app",
        "host": settings.HOST,
        "port": settings.PORT,
        "reload": settings.DEBUG,
        "log_level": settings.LOG_LEVEL.lower(),
        "access_log": settings.DEBUG,
    }

    logger.info(f"🌐 URL: http://{settings.HOST}:{settings.PORT}")
    logger.info(f"📚 Docs: http://{settings.HOST}:{settings.PORT}/docs")

    uvicorn.run(**uvicorn_config)
