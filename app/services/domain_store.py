import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import InvalidTransitionError, NotFoundError, PersistenceError
from app.models.domains import Domain, DomainStatus

logger = logging.getLogger(__name__)


@contextmanager
def _write(db: Session, action: str):
    try:
        yield
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Store write failed ({action}): {e}")
        raise PersistenceError(f"Failed to {action}: {e}") from e


class DomainStore:
    """
    Persistence for domain jobs. Every write commits immediately so that
    status changes are visible to other sessions as soon as they happen.
    """

    def find_by_id(self, db: Session, domain_id: int) -> Optional[Domain]:
        return db.get(Domain, domain_id, populate_existing=True)

    def get(self, db: Session, domain_id: int) -> Domain:
        domain = self.find_by_id(db, domain_id)
        if domain is None:
            raise NotFoundError(domain_id)
        return domain

    def find_oldest_queued(self, db: Session) -> Optional[Domain]:
        return db.query(Domain) \
                 .filter(Domain.status == DomainStatus.QUEUED.value) \
                 .order_by(Domain.created_at.asc(), Domain.id.asc()) \
                 .first()

    def claim(self, db: Session, domain_id: int) -> bool:
        """
        Atomically moves a job from queued to running.
        Returns False when the job is no longer queued.
        """
        with _write(db, f"claim domain {domain_id}"):
            claimed = db.query(Domain) \
                        .filter(Domain.id == domain_id, Domain.status == DomainStatus.QUEUED.value) \
                        .update(
                            {
                                Domain.status: DomainStatus.RUNNING.value,
                                Domain.error_message: None,
                                Domain.updated_at: datetime.utcnow(),
                            },
                            synchronize_session=False,
                        )
        if claimed:
            db.expire_all()
        return claimed == 1

    def set_status(self, db: Session, domain_id: int, status: DomainStatus, **fields) -> Domain:
        """
        Moves a job to `status` if the transition is permitted and writes
        the given result fields. error_message is cleared unless the
        target status is error.
        """
        domain = self.get(db, domain_id)
        current = DomainStatus(domain.status)
        if not current.can_transition(status):
            raise InvalidTransitionError(current.value, status.value)

        with _write(db, f"set domain {domain_id} to {status.value}"):
            domain.status = status.value
            if status != DomainStatus.ERROR:
                domain.error_message = None
            for key, value in fields.items():
                setattr(domain, key, value)
            domain.updated_at = datetime.utcnow()

        logger.info(f"Domain {domain_id} ({domain.domain}): {current.value} -> {status.value}")
        return domain

    def list_page(self, db: Session, skip: int = 0, limit: int = 10):
        total = self.count(db)
        items = db.query(Domain).order_by(Domain.id.desc()).offset(skip).limit(limit).all()
        return items, total

    def newest(self, db: Session, limit: int = 20):
        return db.query(Domain).order_by(Domain.created_at.desc(), Domain.id.desc()).limit(limit).all()

    def count(self, db: Session) -> int:
        return db.query(Domain).count()

    def existing_domains(self, db: Session, names: Iterable[str]) -> set[str]:
        names = list(names)
        if not names:
            return set()
        rows = db.query(Domain.domain).filter(Domain.domain.in_(names)).all()
        return {row.domain for row in rows}

    def insert_domains(self, db: Session, names: list[str], user_query: Optional[str] = None) -> list[str]:
        """Inserts new domains in the created state, skipping ones already stored."""
        existing = self.existing_domains(db, names)
        new_names = [name for name in names if name not in existing]
        with _write(db, "insert domains"):
            db.add_all([
                Domain(domain=name, status=DomainStatus.CREATED.value, user_query=user_query)
                for name in new_names
            ])
        return new_names

    def delete_all(self, db: Session) -> int:
        with _write(db, "delete domains"):
            deleted = db.query(Domain).delete(synchronize_session=False)
        return deleted


domain_store = DomainStore()
