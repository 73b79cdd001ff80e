from fastapi import APIRouter, Depends
from app.api.routers.domains import get_processor
from app.schemas.domains import ProcessNextResponse

router = APIRouter()


@router.api_route("/process-next", methods=["GET", "POST"], response_model=ProcessNextResponse)
async def process_next(processor=Depends(get_processor)):
    """Processes the oldest queued domain, if any."""
    result = await processor.process_next()
    return ProcessNextResponse(
        success=result.success,
        message=result.message,
        processed=result.processed,
        domain=result.domain,
        error=result.error,
    )
