# middlewares/headers.py
from fastapi import Request

from settings import ASSETS_PREFIX

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}
IMMUTABLE_CACHE = "public, max-age=31536000, immutable"


async def security_and_cache_headers(request: Request, call_next):
    resp = await call_next(request)
    extra = dict(SECURITY_HEADERS)
    # hashed build assets never change under the same name
    if request.url.path.startswith(ASSETS_PREFIX) and resp.status_code == 200:
        extra["Cache-Control"] = IMMUTABLE_CACHE
    for name, value in extra.items():
        resp.headers.setdefault(name, value)
    return resp
