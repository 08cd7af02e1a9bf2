"""Error taxonomy shared by every module.

Services raise these instead of ``HTTPException`` so they stay usable outside
a request; ``trustcore.main`` renders them with their ``status_code``.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError

from trustcore.core.db import utcnow

logger = logging.getLogger(__name__)


class TrustSafetyError(Exception):
    """Base exception for trust & safety errors."""

    status_code = 500
    code = "error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(TrustSafetyError):
    """Malformed or out-of-range input."""

    status_code = 400
    code = "validation_error"


class AuthError(TrustSafetyError):
    """Missing or invalid credential."""

    status_code = 401
    code = "auth_error"


class PolicyViolation(TrustSafetyError):
    """The caller is not allowed to do this (self-block, self-report, banned...)."""

    status_code = 403
    code = "policy_violation"


class NotFound(TrustSafetyError):
    """Target is absent or filtered out for this viewer."""

    status_code = 404
    code = "not_found"


class Conflict(TrustSafetyError):
    """Duplicate report or a transition out of a terminal state."""

    status_code = 409
    code = "conflict"


class UpstreamError(TrustSafetyError):
    """Classifier unreachable or answered garbage. Never reaches a caller."""

    status_code = 502
    code = "upstream_error"


class StoreError(TrustSafetyError):
    """Database failure we could not interpret."""

    status_code = 500
    code = "store_error"


@contextmanager
def store_errors(
    operation: str,
    actor_id: Optional[int] = None,
    content_type: Optional[str] = None,
    content_id: Optional[Any] = None,
) -> Iterator[None]:
    """Translate raw SQLAlchemy failures into ``StoreError``.

    Logs the correlation fields so a 500 can be traced back to the request.
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(
            f"[Store] {operation} failed | actor={actor_id} content_type={content_type} "
            f"content_id={content_id} at={utcnow().isoformat()} | {e.__class__.__name__}: {e}"
        )
        raise StoreError(f"Failed to {operation}") from e
