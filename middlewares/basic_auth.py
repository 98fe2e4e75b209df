# middlewares/basic_auth.py
import base64
import binascii
import hmac
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("uvicorn.error")

REALM = "Protected"
SCHEME_PREFIX = "Basic "

# stripped from the token before decoding; missing "=" padding is also accepted
_ASCII_WHITESPACE = re.compile(r"[\t\n\f\r ]")


@dataclass(frozen=True)
class BasicAuthCredentials:
    username: str | None
    password: str | None

    @property
    def configured(self) -> bool:
        return bool(self.username) and bool(self.password)


class Decision(Enum):
    ALLOW = "allow"
    DENY = "deny"
    CONFIG_ERROR = "config_error"


def unauthorized_response() -> Response:
    return PlainTextResponse(
        "Unauthorized",
        status_code=401,
        headers={"WWW-Authenticate": f'Basic realm="{REALM}"'},
    )


def configuration_error_response() -> Response:
    return PlainTextResponse("Configuration error", status_code=500)


def _b64decode_forgiving(token: str) -> bytes | None:
    token = _ASCII_WHITESPACE.sub("", token)
    if len(token) % 4 == 1:
        return None
    token += "=" * (-len(token) % 4)
    try:
        return base64.b64decode(token, validate=True)
    except (binascii.Error, ValueError):
        return None


def decode_basic_credentials(header: str | None) -> tuple[bytes, bytes] | None:
    """
    Parse an Authorization header value into (username, password) bytes.
    Returns None for a missing header, another scheme, invalid base64
    or a payload without a ':' separator.
    """
    if not header or not header.startswith(SCHEME_PREFIX):
        return None
    raw = _b64decode_forgiving(header[len(SCHEME_PREFIX):])
    if raw is None:
        logger.warning("Failed to decode Basic Authorization header")
        return None
    user, sep, password = raw.partition(b":")
    if not sep:
        return None
    return user, password


def check_request(request: Request, credentials: BasicAuthCredentials) -> tuple[Decision, str]:
    if not credentials.configured:
        return Decision.CONFIG_ERROR, "credentials not configured"

    provided = decode_basic_credentials(request.headers.get("Authorization"))
    if provided is None:
        return Decision.DENY, "missing or malformed header"

    user, password = provided
    # evaluate both so timing doesn't reveal which field was wrong
    user_ok = hmac.compare_digest(user, credentials.username.encode("utf-8"))
    pass_ok = hmac.compare_digest(password, credentials.password.encode("utf-8"))
    if not (user_ok and pass_ok):
        return Decision.DENY, "credential mismatch"
    return Decision.ALLOW, ""


async def handle(
    request: Request,
    credentials: BasicAuthCredentials,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    decision, reason = check_request(request, credentials)
    if decision is Decision.CONFIG_ERROR:
        logger.error("Basic auth credentials are not configured (BASIC_AUTH_USER / BASIC_AUTH_PASS)")
        return configuration_error_response()
    if decision is Decision.DENY:
        logger.debug("Basic auth denied: %s", reason)
        return unauthorized_response()
    return await call_next(request)


class BasicAuthMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, credentials: Callable[[], BasicAuthCredentials]):
        super().__init__(app)
        self.credentials = credentials

    async def dispatch(self, request: Request, call_next):
        return await handle(request, self.credentials(), call_next)
