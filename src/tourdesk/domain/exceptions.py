"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.

Field validation and seat admission are *not* reported through exceptions:
they come back as structured results (``ValidationError`` lists,
``SeatAvailability``, ``CommitResult``) so callers can render them.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class RuleViolation(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class PermissionDenied(DomainException):
    """The acting user's role does not allow the operation."""


class UploadFailed(DomainException):
    """A passenger document could not be stored.

    Scoped to a single passenger's document field; the rest of the
    draft record stays as it was.
    """


class StoreError(DomainException):
    """The record store could not be read or written (I/O, timeout, driver)."""
