from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
import os
from app.api.auth import require_password
from app.api.routers import domains, health, queue
from app.database import engine, Base
from app.scheduler import start_scheduler, stop_scheduler
from app.services.ai_service import ai_service
import logging

import time

# Ensure the system timezone (set in Dockerfile) is applied to the Python process
if os.name != 'nt':  # tzset is not available on Windows
    time.tzset()

logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(process)d] [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S %z",
)

logger = logging.getLogger(__name__)

api_prefix = '/api/v1'

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Domain Describer API")

@app.on_event("startup")
async def startup_event():
    start_scheduler()

@app.on_event("shutdown")
async def shutdown_event():
    stop_scheduler()
    await ai_service.aclose()

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error"},
    )

app.include_router(
    domains.router,
    prefix=f'{api_prefix}/domains',
    tags=["domains"],
    dependencies=[Depends(require_password)],
)
app.include_router(queue.router, prefix=f'{api_prefix}/queue', tags=["queue"])
app.include_router(
    health.router,
    prefix=f'{api_prefix}/health',
    tags=["health"],
    dependencies=[Depends(require_password)],
)
