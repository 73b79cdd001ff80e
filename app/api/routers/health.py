import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.database import get_db
from app.services.domain_store import domain_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/db")
def database_health(db: Session = Depends(get_db)):
    """Checks the database connection by counting domains."""
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        count = domain_store.count(db)
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {str(e)}")
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "database": "disconnected",
                "error": str(e),
                "timestamp": timestamp,
            },
        )
    return {
        "status": "ok",
        "database": "connected",
        "domains_count": count,
        "timestamp": timestamp,
    }
