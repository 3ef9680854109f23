"""
Turns a controller call into exactly one HTTP response.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from fastapi import Response

from httpcallback.results import ACTION_RESULT_TYPES, ActionResult, ResponseWriter

logger = logging.getLogger(__name__)

INTERNAL_SERVER_ERROR = 500


def write_result_or_error(
    writer: ResponseWriter,
    result: Optional[ActionResult],
    error: Optional[BaseException],
) -> None:
    """
    Render the result, or a bare 500 when the controller failed.

    The error is logged but never shown to the client.
    """
    if error is not None:
        logger.error(
            "Controller finished with error: %s",
            error,
            exc_info=(type(error), error, error.__traceback__),
        )
        writer.write_header(INTERNAL_SERVER_ERROR)
        return
    result.write_response(writer)


def dispatch(handler: Callable[..., ActionResult], *args: Any) -> Response:
    writer = ResponseWriter()
    logger.debug("Handing request to %s", getattr(handler, "__qualname__", handler))
    try:
        result = handler(*args)
        if not isinstance(result, ACTION_RESULT_TYPES):
            raise TypeError(
                f"{handler!r} returned {type(result).__name__}, expected an action result"
            )
        write_result_or_error(writer, result, None)
    except Exception as exc:
        if writer.written:
            raise
        write_result_or_error(writer, None, exc)
    return writer.to_response()
