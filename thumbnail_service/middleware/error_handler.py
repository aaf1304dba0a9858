import logging
from collections.abc import Awaitable, Callable

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def _envelope(request: Request, status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "ok": False,
            "error": message,
            "request_id": getattr(request.state, "request_id", None),
        },
    )


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        msg = str(error.get("msg", "Invalid request"))
        msg = msg.removeprefix("Value error, ")
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        if loc and error.get("type") != "value_error":
            msg = f"{'.'.join(loc)}: {msg}"
        messages.append(msg)
    return "; ".join(messages) or "Invalid request"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _envelope(request, exc.status_code, message)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    return _envelope(request, status.HTTP_400_BAD_REQUEST, _validation_message(exc))


async def error_envelope_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    try:
        return await call_next(request)
    except StarletteHTTPException as exc:
        return await http_exception_handler(request, exc)
    except Exception as exc:
        logger.exception("Unhandled exception")
        return _envelope(request, status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Internal error")
