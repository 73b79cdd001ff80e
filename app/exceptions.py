class DomainDescriberError(Exception):
    """Base class for errors raised by the domain processing pipeline."""


class NotFoundError(DomainDescriberError):
    def __init__(self, domain_id: int):
        super().__init__(f"Domain {domain_id} not found")
        self.domain_id = domain_id


class InvalidTransitionError(DomainDescriberError):
    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move domain from '{current}' to '{target}'")
        self.current = current
        self.target = target


class FetchError(DomainDescriberError):
    """Both the https and the http attempt failed."""


class GenerationError(DomainDescriberError):
    """The text-generation endpoint failed."""


class GenerationCredentialError(GenerationError):
    """The text-generation credential is missing or was rejected."""


class PersistenceError(DomainDescriberError):
    """A write to the domain store failed and was rolled back."""
