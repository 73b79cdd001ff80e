import logging
import math
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session
from app.database import get_db
from app.exceptions import InvalidTransitionError, NotFoundError
from app.jobs.process_domains import domain_processor
from app.schemas.domains import (
    ClearResponse,
    DomainActionResponse,
    DomainListResponse,
    DomainResponse,
    UploadResponse,
)
from app.services.domain_service import CSVValidationError, domain_service
from app.services.domain_store import domain_store

logger = logging.getLogger(__name__)

router = APIRouter()

PAGE_SIZE = 10


def get_processor():
    return domain_processor


async def _process_in_background(processor):
    try:
        await processor.process_next()
    except Exception:
        logger.exception("Background processing after run-agent failed")


@router.get("/", response_model=DomainListResponse)
def list_domains(
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db)
):
    """Retrieves a paged list of domains, newest first."""
    items, total = domain_service.get_domains(db, page=page, size=PAGE_SIZE)
    skip = (page - 1) * PAGE_SIZE

    return DomainListResponse(
        domains=[DomainResponse.model_validate(item) for item in items],
        total=total,
        total_pages=math.ceil(total / PAGE_SIZE),
        page=page,
        start_index=skip + 1 if total else 0,
        end_index=min(skip + PAGE_SIZE, total),
    )


@router.post("/upload", response_model=UploadResponse)
async def upload_domains(
    file: UploadFile = File(...),
    user_query: Optional[str] = Form(None),
    db: Session = Depends(get_db)
):
    """Imports domains from a CSV file with a 'domain' column."""
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="Only CSV files are allowed")

    content = await file.read()
    try:
        stats, results = domain_service.ingest_csv(db, content, user_query=user_query)
    except CSVValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return UploadResponse(
        stats=stats,
        processing_results=results,
        domains=[DomainResponse.model_validate(item) for item in domain_store.newest(db)],
    )


@router.post("/{domain_id}/run-agent", response_model=DomainActionResponse)
async def run_agent(
    domain_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    processor=Depends(get_processor)
):
    """Queues a created domain and starts processing right away."""
    try:
        domain = domain_service.run_agent(db, domain_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTransitionError:
        raise HTTPException(status_code=400, detail="Only domains in status 'created' can be started")

    # Immediate trigger; the periodic job picks it up otherwise
    background_tasks.add_task(_process_in_background, processor)

    return DomainActionResponse(domain=DomainResponse.model_validate(domain))


@router.post("/{domain_id}/restart", response_model=DomainActionResponse)
def restart_domain(domain_id: int, db: Session = Depends(get_db)):
    """Puts a running or failed domain back in the queue."""
    try:
        domain = domain_service.restart(db, domain_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTransitionError:
        raise HTTPException(status_code=400, detail="Only domains in status 'running' or 'error' can be restarted")

    return DomainActionResponse(domain=DomainResponse.model_validate(domain))


@router.delete("/", response_model=ClearResponse)
def clear_domains(db: Session = Depends(get_db)):
    """Deletes every domain."""
    deleted = domain_service.clear(db)
    return ClearResponse(message="Database cleared", deleted_count=deleted)
