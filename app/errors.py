"""Error taxonomy shared by every BORGA layer.

Each error carries a ``name`` (its kind) and an ``info`` payload with the
offending ids or fields.  Storage and services raise these; only the HTTP
adapter in ``borga_web.py`` translates a kind into a status code.
"""
from typing import Any, Dict, Optional


class BorgaError(Exception):
    """Base class for all BORGA failures."""

    name = 'FAIL'

    def __init__(self, info: Optional[Any] = None) -> None:
        self.info: Any = info if info is not None else {}
        super().__init__(f"{self.name}: {self.info}")

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-serialisable cause sent to HTTP clients."""
        return {'name': self.name, 'info': self.info}

    def __eq__(self, other) -> bool:
        if not isinstance(other, BorgaError):
            return NotImplemented
        return self.name == other.name and self.info == other.info

    def __hash__(self) -> int:
        return hash(self.name)


class NotFound(BorgaError):
    """A referenced user, group or game does not exist."""
    name = 'NOT_FOUND'


class AlreadyExists(BorgaError):
    """An id collided with an existing entity on create."""
    name = 'ALREADY_EXISTS'


class BadRequest(BorgaError):
    """Malformed, missing or unknown request fields (aggregated)."""
    name = 'BAD_REQUEST'


class MissingParam(BadRequest):
    name = 'MISSING_PARAM'


class Unauthenticated(BorgaError):
    """Missing, unknown or mismatched bearer token."""
    name = 'UNAUTHENTICATED'


class ExternalServiceFailure(BorgaError):
    """The board-game catalog was unreachable or answered with an error."""
    name = 'EXT_SVC_FAIL'


class Failure(BorgaError):
    name = 'FAIL'
