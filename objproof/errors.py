"""Failure taxonomy for rewrite operations.

Every failure that reaches the orchestrator's boundary is one of the
RewriteError subclasses below, so callers can branch on ``kind`` instead of
matching on message text.
"""

from enum import Enum


class ErrorKind(str, Enum):
    GENERATION_SERVICE = "generation_service"
    COLLABORATOR = "collaborator"
    BROKEN_LINEAGE = "broken_lineage"
    INVALID_REQUEST = "invalid_request"


class RewriteError(Exception):
    """Base class for all rewrite failures."""

    kind: ErrorKind = ErrorKind.COLLABORATOR

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class GenerationServiceError(RewriteError):
    """The text-generation service failed (network, rate limit, model error)."""

    kind = ErrorKind.GENERATION_SERVICE


class CollaboratorError(RewriteError):
    """An outline, chunking, reconstruction or stitching step failed."""

    kind = ErrorKind.COLLABORATOR


class BrokenLineageError(RewriteError):
    """A parent iteration is missing or the parent chain loops."""

    kind = ErrorKind.BROKEN_LINEAGE


class InvalidRequestError(RewriteError):
    """The rewrite request is malformed (blank text, inconsistent bounds)."""

    kind = ErrorKind.INVALID_REQUEST


def call_collaborator(name: str, fn, *args, **kwargs):
    """Invoke a collaborator, re-raising foreign exceptions as CollaboratorError.

    RewriteErrors raised by the collaborator pass through untouched so a
    generation failure deep inside an agent keeps its kind.
    """
    try:
        return fn(*args, **kwargs)
    except RewriteError:
        raise
    except Exception as exc:
        raise CollaboratorError(f"{name} failed: {exc}") from exc
