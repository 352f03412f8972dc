"""Translate service-layer exceptions into HTTP errors for route handlers."""

import logging

from fastapi import HTTPException

from src.core.errors import TicketDeskError

logger = logging.getLogger(__name__)


def http_error(error: Exception, action: str) -> HTTPException:
    """
    Map an exception raised while handling a request to an ``HTTPException``.

    Domain errors keep their status and message, ``ValueError`` becomes a 400
    and anything else is logged with its traceback and reported as a 500.

    Args:
        error: The exception caught by the handler
        action: Short description used in the log line, e.g. "create ticket"
    """
    if isinstance(error, HTTPException):
        return error
    if isinstance(error, TicketDeskError):
        if error.status_code >= 500:
            logger.error(f"Failed to {action}: {error.message}")
        return HTTPException(status_code=error.status_code, detail=error.message)
    if isinstance(error, ValueError):
        return HTTPException(status_code=400, detail=str(error))

    logger.exception(f"Failed to {action}: {error}")
    return HTTPException(status_code=500, detail=f"Failed to {action}")
