import logging
from dataclasses import dataclass
from typing import Optional

from app.database import SessionLocal
from app.exceptions import InvalidTransitionError
from app.models.domains import Domain, DomainStatus
from app.services.ai_service import ai_service
from app.services.content_extractor import extract_snippet
from app.services.domain_store import domain_store
from app.services.error_sanitizer import sanitize_error
from app.services.fetch_service import fetch_service
from app.services.slack_service import slack_service

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    processed: int
    success: bool
    message: str
    domain_id: Optional[int] = None
    domain: Optional[str] = None
    error: Optional[str] = None


class DomainProcessor:
    """
    Processes one queued domain per call: claim, fetch, extract,
    summarize, persist. Pipeline failures end in the error state and are
    never raised to the caller.
    """

    def __init__(self, fetcher=fetch_service, summarizer=ai_service, store=domain_store,
                 session_factory=SessionLocal, notifier=slack_service):
        self.fetcher = fetcher
        self.summarizer = summarizer
        self.store = store
        self.session_factory = session_factory
        self.notifier = notifier

    def _claim_next(self, db) -> Optional[Domain]:
        while True:
            candidate = self.store.find_oldest_queued(db)
            if candidate is None:
                return None
            if self.store.claim(db, candidate.id):
                return self.store.get(db, candidate.id)
            logger.info(f"Domain {candidate.id} was claimed by another run, picking the next one")

    async def _run_pipeline(self, job: Domain):
        html = await self.fetcher.fetch(job.domain)
        snippet = extract_snippet(html)
        description = await self.summarizer.describe_company(snippet, job.domain, job.user_query)
        return snippet, description

    def _notify(self, domain: str, status: str, message: str):
        if self.notifier is None:
            return
        try:
            self.notifier.send_domain_status(domain, status, message)
        except Exception as e:
            logger.error(f"Notification for {domain} failed: {str(e)}")

    async def process_next(self) -> ProcessResult:
        db = self.session_factory()
        try:
            job = self._claim_next(db)
            if job is None:
                logger.info("No domains in queue")
                return ProcessResult(processed=0, success=True, message="No domains in queue")

            job_id, name = job.id, job.domain
            logger.info(f"Processing domain {job_id} ({name})")
            try:
                snippet, description = await self._run_pipeline(job)
                self.store.set_status(
                    db, job_id, DomainStatus.COMPLETED,
                    company_description=description,
                    raw_content=snippet,
                )
            except Exception as e:
                logger.error(f"Processing domain {job_id} ({name}) failed: {str(e)}")
                error_message = sanitize_error(e)
                try:
                    self.store.set_status(db, job_id, DomainStatus.ERROR, error_message=error_message)
                except InvalidTransitionError as transition_error:
                    # Restarted while in flight; the queued job will be processed again
                    logger.warning(f"Domain {job_id} ({name}) was requeued during processing: {str(transition_error)}")
                    return ProcessResult(
                        processed=1,
                        success=True,
                        message=f"Domain {name} was requeued during processing, result discarded",
                        domain_id=job_id,
                        domain=name,
                    )
                except Exception as persist_error:
                    logger.error(f"Could not record error state for domain {job_id}: {str(persist_error)}")
                    return ProcessResult(
                        processed=1,
                        success=False,
                        message=f"Failed to record the outcome of domain {name}",
                        domain_id=job_id,
                        domain=name,
                        error=sanitize_error(persist_error),
                    )
                self._notify(name, DomainStatus.ERROR.value, error_message)
                return ProcessResult(
                    processed=1,
                    success=False,
                    message=f"Failed to process domain {name}",
                    domain_id=job_id,
                    domain=name,
                    error=error_message,
                )

            logger.info(f"Domain {job_id} ({name}) completed")
            self._notify(name, DomainStatus.COMPLETED.value, description)
            return ProcessResult(
                processed=1,
                success=True,
                message=f"Domain {name} processed successfully",
                domain_id=job_id,
                domain=name,
            )
        finally:
            db.close()


domain_processor = DomainProcessor()
