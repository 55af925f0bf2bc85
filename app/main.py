from fastapi import FastAPI
from app.modules.dashboard.api import router as dashboard_router
from app.core.database import db_manager
from app.core.global_error_handler import register_global_exception_handlers

# Lifecycle passes run in the Celery worker/beat; this app only serves the read API.
app = FastAPI(
    title="Vendor Subscription Lifecycle API",
    description="Operational read API for vendor plan subscriptions: upcoming and past expirations.",
    version="1.0.0"
)

# Register global exception handlers
register_global_exception_handlers(app)

@app.on_event("shutdown")
async def shutdown_event():
    """Close database connections on shutdown."""
    await db_manager.close()

# Include routers
app.include_router(dashboard_router, prefix="/api")

@app.get("/api/")
async def root():
    return {"message": "Vendor Subscription Lifecycle API is running"}

@app.get("/api/health")
async def health_check():
    return {"status": "healthy"}
