from __future__ import annotations

import logging
from functools import wraps

from ..core.exceptions import DomainError, InternalError

logger = logging.getLogger(__name__)


def service_boundary(operation: str):
    """Turn unexpected failures of a use case into ``InternalError``.

    Domain errors pass through untouched and are not logged as failures.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except DomainError:
                raise
            except Exception as exc:
                logger.exception("%s failed", operation)
                raise InternalError("Internal server error") from exc

        return wrapper

    return decorator
