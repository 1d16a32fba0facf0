import logging
import time

from fastapi import Request, status

from .responses import error_response

logger = logging.getLogger("ecommerce.api")

API_KEY_HEADER = "X-API-Key"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}


async def require_api_key(request: Request, call_next):
    """Reject the request before routing unless it carries the configured shared secret."""
    api_key = request.headers.get(API_KEY_HEADER)
    if not api_key:
        return error_response(f"{API_KEY_HEADER} header required", status.HTTP_401_UNAUTHORIZED)
    if api_key != request.app.state.settings.api_key:
        logger.warning("Rejected %s %s: invalid key", request.method, request.url.path)
        return error_response("invalid key", status.HTTP_403_FORBIDDEN)
    return await call_next(request)


async def log_requests(request: Request, call_next):
    request.state.start_time = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - request.state.start_time) * 1000
    logger.info(
        "%s %s %d %.1fms",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


def elapsed_ms(request: Request) -> int:
    started = getattr(request.state, "start_time", None)
    if started is None:
        return 0
    return int((time.perf_counter() - started) * 1000)
