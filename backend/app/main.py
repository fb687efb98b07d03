"""
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import shipments, webhook
from app.config.settings import Settings
from app.db.database import Database
from app.services.image_store import ImageStore
from app.services.request_logger import RequestLogger
from app.services.waybill_locks import WaybillLocks

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/carrier"


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or Settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = database or Database(settings.database_url, pool_timeout=settings.db_timeout)
        # Create database tables
        db.create_all()
        app.state.db = db
        app.state.image_store = ImageStore(settings.upload_dir)
        app.state.request_logger = RequestLogger(db.session, sanitize=settings.audit_sanitize_images)
        app.state.waybill_locks = WaybillLocks()
        logger.info("Carrier webhook API started (env=%s)", settings.app_env)
        try:
            yield
        finally:
            db.dispose()
            logger.info("Carrier webhook API stopped")

    app = FastAPI(
        title="Carrier Tracking Webhook",
        description="Receives carrier shipment status pushes and stores them",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict):
            content = exc.detail
        else:
            content = {"success": False, "message": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    # Include routers
    app.include_router(webhook.router, prefix=API_PREFIX, tags=["webhook"])
    app.include_router(shipments.router, prefix=API_PREFIX, tags=["shipments"])

    @app.get("/")
    async def root():
        return {
            "success": True,
            "message": "Carrier Tracking Webhook API",
            "endpoints": {
                "health": "/health",
                "webhook": f"{API_PREFIX}/status",
                "shipments": f"{API_PREFIX}/shipments",
                "shipment": f"{API_PREFIX}/shipments/{{waybill_no}}",
            },
        }

    @app.get("/health")
    async def health():
        return {"status": "healthy", "timestamp": datetime.utcnow().isoformat()}

    return app


app = create_app()
