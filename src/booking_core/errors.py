"""Error taxonomy for store access and tool handling.

Every failure a tool call can report is one of four kinds:
- ValidationError: arguments violate the operation's schema (no store call made)
- NotFoundError: an identifier or parent organization code matched no row
- AuthorizationError: the requester token is not permitted for the organization
- StoreError: any other backing-store failure, including connectivity
"""
from typing import Optional


class BookingError(Exception):
    """Base class for all enveloped failures."""

    kind = "error"


class ValidationError(BookingError):
    """Raised when tool arguments fail schema validation."""

    kind = "validation"

    def __init__(self, message: str, violations: Optional[list[str]] = None):
        super().__init__(message)
        self.violations = violations or []


class NotFoundError(BookingError):
    """Raised when a record or parent organization does not exist."""

    kind = "not_found"

    def __init__(self, message: str, entity: str, identifier: object):
        super().__init__(message)
        self.entity = entity
        self.identifier = identifier


class AuthorizationError(BookingError):
    """Raised when a requester token may not mutate an organization's offerings."""

    kind = "authorization"

    def __init__(self, message: str, organization_code: object):
        super().__init__(message)
        self.organization_code = organization_code


class StoreError(BookingError):
    """Raised when the backing store fails for any reason other than 'no row'."""

    kind = "store"
