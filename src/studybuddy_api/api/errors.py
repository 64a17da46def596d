"""Translation of moderation exceptions into HTTP errors."""

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException, status
from loguru import logger

from studybuddy_api.lib.moderation import InvalidOperationError, NotFoundError


@contextmanager
def moderation_errors(action: str) -> Iterator[None]:
    """Convert errors raised by a moderation operation into ``HTTPException``.

    ``NotFoundError`` becomes 404 and ``InvalidOperationError`` 400, both
    carrying the operation's message.  Anything else is logged and reported
    as a generic 500.

    Args:
        action: Short description used in log lines and the 500 detail.
    """
    try:
        yield
    except HTTPException:
        raise
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except InvalidOperationError as e:
        logger.warning(f"Rejected {action}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except Exception as e:
        logger.error(f"Unexpected error during {action}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal server error during {action}.",
        ) from e
