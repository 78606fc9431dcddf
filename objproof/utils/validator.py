"""Request validation — run inside the orchestrator's failure boundary."""

from objproof.errors import InvalidRequestError
from objproof.models import RewriteRequest


def validate_request(request: RewriteRequest) -> None:
    """Check that the request can be processed.

    Raises InvalidRequestError if the text is empty or whitespace-only, or
    if an explicit target word count is not a positive integer.
    """
    if not isinstance(request.text, str) or not request.text.strip():
        raise InvalidRequestError("Text to rewrite must be a non-empty string.")

    target = request.target_word_count
    if target is not None and (isinstance(target, bool) or not isinstance(target, int) or target <= 0):
        raise InvalidRequestError(f"Target word count must be a positive integer, got {target!r}.")
