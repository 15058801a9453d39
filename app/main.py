"""
app/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Registers API routes
- No business logic should be written here
- Manages application lifecycle (startup/shutdown)
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import time

from app.core.config import settings, validate_settings
from app.core.errors import add_exception_handlers
from app.core.logging import setup_logging, get_logger
from app.db.mongo import connect_to_mongo
from app.db.indexes import create_indexes
from app.services.payment_service import close_payment_gateway
from app.services.promotion_service import resume_pending_promotions
from app.api import auth, meal_requests, meals, payments, users

# Initialize logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info("🚀 Starting MealMate API...")

    try:
        logger.info("Validating configuration...")
        validate_settings()
        logger.info("✅ Configuration validated")

        logger.info("Connecting to MongoDB...")
        database = await connect_to_mongo()
        app.state.database = database
        logger.info("✅ MongoDB client ready")

        if settings.should_ping_database:
            logger.info("Creating database indexes...")
            await create_indexes(database)
            logger.info("✅ Database indexes created")

            await resume_pending_promotions(database)

        logger.info("🎉 MealMate API started successfully!")
        logger.info(f"Environment: {settings.ENVIRONMENT}")
        logger.info(f"Debug Mode: {settings.DEBUG}")

    except Exception as e:
        logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
        raise

    yield  # Application runs here

    # Shutdown
    logger.info("🛑 Shutting down MealMate API...")

    try:
        await close_payment_gateway()
        logger.info("✅ Payment gateway closed")

        app.state.database.close()
        app.state.database = None
        logger.info("✅ MongoDB connection closed")

        logger.info("👋 MealMate API shut down successfully")

    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}", exc_info=True)


app = FastAPI(
    title="MealMate API",
    description="Meal subscription backend: catalog, upcoming meals, requests and payments",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,  # Disable docs in production
    redoc_url="/redoc" if settings.is_development else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to all responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    if process_time > 5.0:
        logger.warning(
            f"Slow request detected: {request.method} {request.url.path}",
            extra={"process_time": process_time}
        )

    return response


add_exception_handlers(app)

app.include_router(auth.router, tags=["Auth"])
app.include_router(users.router, tags=["Users"])
# Before meals: /meals/request and /meals/serve must not hit /meals/{meal_id}
app.include_router(meal_requests.router, tags=["Meal Requests"])
app.include_router(meals.router, tags=["Meals"])
app.include_router(payments.router, tags=["Payments"])


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - basic info."""
    return {
        "name": "MealMate API",
        "version": "1.0.0",
        "status": "server running",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Checks database connectivity.
    """
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "version": "1.0.0",
        "checks": {}
    }

    database = getattr(app.state, "database", None)
    db_healthy = database is not None and await database.is_healthy()
    health_status["checks"]["database"] = "healthy" if db_healthy else "unhealthy"
    if not db_healthy:
        health_status["status"] = "unhealthy"

    health_status["checks"]["payments"] = "configured" if settings.STRIPE_SK_KEY else "not_configured"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(content=health_status, status_code=status_code)


@app.get("/ready", tags=["Health"])
async def readiness_check():
    """
    Readiness probe - indicates if app is ready to receive traffic.
    """
    database = getattr(app.state, "database", None)
    if database is not None and await database.is_healthy():
        return {"status": "ready"}
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "reason": "database_unavailable"}
    )


@app.get("/live", tags=["Health"])
async def liveness_check():
    """
    Liveness probe - indicates if app is alive.
    """
    return {"status": "alive"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
