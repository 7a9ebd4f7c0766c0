"""Main FastAPI application"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime
import logging

from urbansprout import __version__
from urbansprout.config import settings
from urbansprout.database import connect_to_mongo, close_mongo_connection
from urbansprout.api.v1 import store, orders, payments, admin, blog, notifications, garden, plants
from urbansprout.schemas.common import ErrorResponse

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events"""
    # Startup
    logger.info("Starting up UrbanSprout API...")
    await connect_to_mongo()
    logger.info("Application ready!")

    yield

    # Shutdown
    logger.info("Shutting down UrbanSprout API...")
    await close_mongo_connection()
    logger.info("Shutdown complete!")


# Create FastAPI application
app = FastAPI(
    title="UrbanSprout API",
    version=__version__,
    description="""
    Plant-care community and store API for UrbanSprout.

    ## Features

    * **Store**: Product catalogue, server-side cart and wishlist with guest merge on sign-in
    * **Checkout**: Razorpay online payments and cash on delivery orders
    * **Orders**: Order history, cancellation and verified-purchase reviews
    * **Plants**: Plant catalogue, search and the plant suggestion quiz
    * **My Garden**: Plants a user is growing, with a growth journal per plant
    * **Blog**: Community posts with likes, bookmarks, comments and shares
    * **Notifications**: In-app notifications for orders and blog activity
    * **Admin**: Order fulfilment with stock tracking and blog moderation

    ## Authentication

    Most endpoints require authentication using JWT tokens.
    Include the token in the Authorization header:
    ```
    Authorization: Bearer <your_jwt_token>
    ```
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url] if settings.frontend_url else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoints
@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint to verify the API is running.
    """
    return {
        "success": True,
        "status": "healthy",
        "version": __version__,
        "app": settings.app_name
    }


@app.get("/liveness", tags=["Health"])
async def liveness_probe():
    """
    Kubernetes liveness probe endpoint.
    """
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat()
    }


@app.get("/readiness", tags=["Health"])
async def readiness_probe():
    """
    Kubernetes readiness probe endpoint.
    Checks database connectivity.
    """
    from urbansprout.database import database

    if database.db is None:
        return JSONResponse(
            status_code=503,
            content={
                "status": "not ready",
                "database": "not connected",
                "timestamp": datetime.utcnow().isoformat()
            }
        )

    try:
        await database.db.command("ping")
    except Exception as e:
        logger.error(f"Readiness check failed: {str(e)}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "not ready",
                "error": str(e),
                "timestamp": datetime.utcnow().isoformat()
            }
        )

    return {
        "status": "ready",
        "database": "connected",
        "timestamp": datetime.utcnow().isoformat()
    }


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint with API information.
    """
    return {
        "success": True,
        "message": "Welcome to UrbanSprout API",
        "version": __version__,
        "docs": "/docs",
        "redoc": "/redoc",
    }


# Include routers
app.include_router(
    store.router,
    prefix="/api/store",
    tags=["Store"]
)

app.include_router(
    orders.router,
    prefix="/api/orders",
    tags=["Orders & Reviews"]
)

app.include_router(
    payments.router,
    prefix="/api/payments",
    tags=["Payments"]
)

app.include_router(
    plants.router,
    prefix="/api/plants",
    tags=["Plants"]
)

app.include_router(
    garden.router,
    prefix="/api/garden",
    tags=["My Garden"]
)

app.include_router(
    blog.router,
    prefix="/api/blog",
    tags=["Blog"]
)

app.include_router(
    notifications.router,
    prefix="/api/notifications",
    tags=["Notifications"]
)

app.include_router(
    admin.router,
    prefix="/api/admin",
    tags=["Admin"]
)


# Error handlers
@app.exception_handler(404)
async def not_found_handler(request, exc):
    """Custom 404 handler"""
    return JSONResponse(
        status_code=404,
        content=ErrorResponse(
            error="Not Found",
            detail=getattr(exc, "detail", None) or "The requested resource was not found"
        ).model_dump()
    )


@app.exception_handler(500)
async def internal_error_handler(request, exc):
    """Custom 500 handler"""
    logger.error(f"Internal server error: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal Server Error",
            detail="An unexpected error occurred. Please try again later."
        ).model_dump()
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "urbansprout.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info"
    )
