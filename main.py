# main.py
import os
import sys
import time
import logging
from typing import Callable
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware

# Ensure app root on path
APP_ROOT = os.path.dirname(os.path.abspath(__file__))
if APP_ROOT not in sys.path:
    sys.path.insert(0, APP_ROOT)

from settings import STATIC_DIR, LOG_REQUESTS, HOST, PORT, basic_auth_credentials

from middlewares.basic_auth import BasicAuthCredentials, BasicAuthMiddleware
from middlewares.headers import security_and_cache_headers

logger = logging.getLogger("uvicorn.error")


class TraceLogMiddleware(BaseHTTPMiddleware):
    """Log the traceback of anything raised below, then let it propagate."""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception("UNCAUGHT EXCEPTION on %s %s", request.method, request.url.path)
            raise


async def _access_log(request, call_next):
    started = time.perf_counter()
    resp = await call_next(request)
    logger.info(
        "%s %s -> %s (%.1f ms, client %s)",
        request.method,
        request.url.path,
        resp.status_code,
        (time.perf_counter() - started) * 1000,
        request.client.host if request.client else "unknown",
    )
    return resp


def create_app(
    static_dir: str | None = None,
    credentials: Callable[[], BasicAuthCredentials] | None = None,
    log_requests: bool = LOG_REQUESTS,
) -> FastAPI:
    """
    Build the site server. Middlewares run outermost first:
    trace log -> access log -> basic auth -> response headers -> static files.
    """
    static_dir = static_dir or STATIC_DIR
    if not os.path.isdir(static_dir):
        logger.warning("Static site directory %s does not exist, build the site first", static_dir)

    app = FastAPI(
        title="Protected Site",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Starlette wraps in reverse order of registration
    app.middleware("http")(security_and_cache_headers)
    app.add_middleware(BasicAuthMiddleware, credentials=credentials or basic_auth_credentials)
    if log_requests:
        app.middleware("http")(_access_log)
    app.add_middleware(TraceLogMiddleware)

    # html=True serves index.html for directories and 404.html for misses
    app.mount("/", StaticFiles(directory=static_dir, html=True, check_dir=False), name="site")
    logger.info("Serving static site from %s", static_dir)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    os.makedirs(STATIC_DIR, exist_ok=True)
    uvicorn.run(
        "main:app",
        host=HOST,
        port=PORT,
        reload=True,
        log_level="debug",
    )
