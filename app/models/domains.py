from enum import Enum
from sqlalchemy import Column, String, DateTime, Integer, Text
from app.database import Base
from datetime import datetime


class DomainStatus(str, Enum):
    CREATED = "created"
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"

    def can_transition(self, target: "DomainStatus") -> bool:
        return target in ALLOWED_TRANSITIONS.get(self, ())


# running -> queued and error -> queued are manual restarts
ALLOWED_TRANSITIONS = {
    DomainStatus.CREATED: (DomainStatus.QUEUED,),
    DomainStatus.QUEUED: (DomainStatus.RUNNING,),
    DomainStatus.RUNNING: (DomainStatus.COMPLETED, DomainStatus.ERROR, DomainStatus.QUEUED),
    DomainStatus.ERROR: (DomainStatus.QUEUED,),
    DomainStatus.COMPLETED: (),
}


class Domain(Base):
    __tablename__ = "domains"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    domain = Column(String(255), unique=True, index=True, nullable=False)
    status = Column(String(16), index=True, nullable=False, default=DomainStatus.CREATED.value)
    user_query = Column(Text, nullable=True)
    raw_content = Column(Text, nullable=True)
    company_description = Column(Text, nullable=True)
    error_message = Column(String(300), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
