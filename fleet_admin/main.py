# fleet_admin/main.py
"""
FastAPI application entry point.
Includes request logging middleware, error handlers, static uploads and all routers.
"""

import os
import time
import uuid

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from fleet_admin.config import settings
from fleet_admin.database import create_tables
from fleet_admin.errors import FleetError
from fleet_admin.routers import brands, health, vehicle_driver_logs, vehicles
from fleet_admin.utils.logger import get_logger, request_id_var

logger = get_logger(__name__)

app = FastAPI(
    title="Fleet Admin API",
    description="Vehicle, driver and compliance records for the fleet admin dashboard.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (admin dashboard runs on a separate origin) ────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Logging Middleware ───────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = (
        request.headers.get("X-Correlation-ID")
        or request.headers.get("X-Request-ID")
        or f"req-{uuid.uuid4().hex[:12]}"
    )
    token = request_id_var.set(request_id)
    start = time.time()
    try:
        response = await call_next(request)
        duration = round((time.time() - start) * 1000, 2)
        logger.info(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    finally:
        request_id_var.reset(token)
    response.headers["X-Request-ID"] = request_id
    return response


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(FleetError)
async def fleet_error_handler(request: Request, exc: FleetError):
    logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": str(exc)},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(vehicles.router, prefix="/api/v1", tags=["Vehicles"])
app.include_router(vehicle_driver_logs.router, prefix="/api/v1", tags=["Vehicle Driver Logs"])
app.include_router(brands.router,   prefix="/api/v1", tags=["Brands"])
app.include_router(health.router,   prefix="/api/v1", tags=["Health"])

# Stored picture paths ({UPLOAD_URL_PREFIX}/...) are served straight from the uploads root
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_ROOT, check_dir=False), name="uploads")


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("Fleet Admin backend starting up...")
    create_tables()
    logger.info("Database tables ready")
    os.makedirs(settings.UPLOAD_ROOT, exist_ok=True)
    logger.info(f"Uploads stored under {settings.UPLOAD_ROOT} (served at {settings.UPLOAD_URL_PREFIX})")
    logger.info(f"Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")


@app.on_event("shutdown")
async def shutdown():
    logger.info("Fleet Admin backend shutting down...")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.BACKEND_HOST, port=settings.BACKEND_PORT)
