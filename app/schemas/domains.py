from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

class DomainResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    domain: str
    status: str
    user_query: Optional[str] = None
    company_description: Optional[str] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class DomainListResponse(BaseModel):
    success: bool = True
    domains: list[DomainResponse]
    total: int
    total_pages: int
    page: int
    start_index: int
    end_index: int

class DomainActionResponse(BaseModel):
    success: bool = True
    domain: DomainResponse

class UploadStats(BaseModel):
    total_rows: int = 0
    inserted: int = 0
    duplicates: int = 0
    invalid: int = 0

class DomainProcessingResult(BaseModel):
    original_domain: str
    cleaned_domain: str
    status: str  # success | duplicate | error
    error_reason: Optional[str] = None

class UploadResponse(BaseModel):
    success: bool = True
    stats: UploadStats
    processing_results: list[DomainProcessingResult]
    domains: list[DomainResponse]

class ClearResponse(BaseModel):
    success: bool = True
    message: str
    deleted_count: int

class ProcessNextResponse(BaseModel):
    success: bool
    message: str
    processed: int
    domain: Optional[str] = None
    error: Optional[str] = None
