import io
import logging
import re
from typing import Optional

import pandas as pd
from sqlalchemy.orm import Session

from app.models.domains import Domain, DomainStatus
from app.schemas.domains import DomainProcessingResult, UploadStats
from app.services.domain_store import domain_store
from app.exceptions import InvalidTransitionError

logger = logging.getLogger(__name__)

DOMAIN_REGEX = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9-_.]*\.[a-zA-Z]{2,}$")


class CSVValidationError(ValueError):
    pass


def clean_domain(raw: str) -> str:
    """Lower-cases and strips scheme, www., path and port."""
    if not raw or not isinstance(raw, str):
        return ""
    cleaned = raw.strip().lower()
    cleaned = re.sub(r"^https?://", "", cleaned)
    cleaned = re.sub(r"^www\.", "", cleaned)
    cleaned = cleaned.split("/")[0]
    cleaned = cleaned.split(":")[0]
    return cleaned


def is_valid_domain(domain: str) -> bool:
    if not domain or not isinstance(domain, str):
        return False
    trimmed = domain.strip()
    return bool(trimmed) and " " not in trimmed and bool(DOMAIN_REGEX.match(trimmed))


def _read_domain_column(content: bytes) -> list[str]:
    if not content or not content.strip():
        raise CSVValidationError("CSV file is empty")
    try:
        df = pd.read_csv(io.BytesIO(content), dtype=str, skip_blank_lines=True, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise CSVValidationError(f"Could not parse CSV file: {str(e)}")

    df.columns = [str(c).strip().lower() for c in df.columns]
    if "domain" not in df.columns:
        raise CSVValidationError("CSV file must contain a 'domain' column")
    if (df.columns == "domain").sum() > 1:
        raise CSVValidationError("CSV file has duplicate 'domain' columns")

    # Rows that are entirely empty are skipped, like blank lines
    df = df[~(df == "").all(axis=1)]
    return [value.strip() for value in df["domain"].tolist()]


class DomainService:
    def ingest_csv(self, db: Session, content: bytes, user_query: Optional[str] = None):
        """
        Parses an uploaded CSV, cleans and validates its domain column and
        stores new domains in the created state. The same user_query is
        attached to every domain of the batch.
        """
        raw_domains = _read_domain_column(content)
        query = (user_query or "").strip() or None

        stats = UploadStats(total_rows=len(raw_domains))
        results: list[DomainProcessingResult] = []
        valid: list[str] = []
        seen: set[str] = set()

        for raw in raw_domains:
            if not raw:
                stats.invalid += 1
                results.append(DomainProcessingResult(
                    original_domain="(empty)", cleaned_domain="", status="error",
                    error_reason="Empty value"))
                continue

            cleaned = clean_domain(raw)
            if not cleaned:
                stats.invalid += 1
                results.append(DomainProcessingResult(
                    original_domain=raw, cleaned_domain="", status="error",
                    error_reason="Could not clean domain"))
                continue

            if not is_valid_domain(cleaned):
                stats.invalid += 1
                results.append(DomainProcessingResult(
                    original_domain=raw, cleaned_domain=cleaned, status="error",
                    error_reason="Invalid domain format"))
                continue

            if cleaned in seen:
                stats.duplicates += 1
                results.append(DomainProcessingResult(
                    original_domain=raw, cleaned_domain=cleaned, status="duplicate",
                    error_reason="Duplicate within file"))
                continue

            seen.add(cleaned)
            valid.append(cleaned)
            results.append(DomainProcessingResult(
                original_domain=raw, cleaned_domain=cleaned, status="success"))

        if valid:
            inserted = set(domain_store.insert_domains(db, valid, user_query=query))
            stats.inserted = len(inserted)
            stats.duplicates += len(valid) - len(inserted)
            for result in results:
                if result.status == "success" and result.cleaned_domain not in inserted:
                    result.status = "duplicate"
                    result.error_reason = "Already in database"

        logger.info(
            f"CSV upload processed. Rows: {stats.total_rows}, inserted: {stats.inserted}, "
            f"duplicates: {stats.duplicates}, invalid: {stats.invalid}."
        )
        return stats, results

    def run_agent(self, db: Session, domain_id: int) -> Domain:
        """Queues a freshly uploaded domain."""
        domain = domain_store.get(db, domain_id)
        if domain.status != DomainStatus.CREATED.value:
            raise InvalidTransitionError(domain.status, DomainStatus.QUEUED.value)
        return domain_store.set_status(db, domain_id, DomainStatus.QUEUED)

    def restart(self, db: Session, domain_id: int) -> Domain:
        """Re-queues a stuck (running) or failed domain."""
        domain = domain_store.get(db, domain_id)
        if domain.status not in (DomainStatus.RUNNING.value, DomainStatus.ERROR.value):
            raise InvalidTransitionError(domain.status, DomainStatus.QUEUED.value)
        return domain_store.set_status(db, domain_id, DomainStatus.QUEUED)

    def get_domains(self, db: Session, page: int = 1, size: int = 10):
        skip = (page - 1) * size
        return domain_store.list_page(db, skip=skip, limit=size)

    def clear(self, db: Session) -> int:
        deleted = domain_store.delete_all(db)
        logger.info(f"Deleted {deleted} domains.")
        return deleted

domain_service = DomainService()
