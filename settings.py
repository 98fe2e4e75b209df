# settings.py
import os
from dotenv import load_dotenv

from middlewares.basic_auth import BasicAuthCredentials

load_dotenv()

# -----------------------------------------------------------------------------
# Core app settings
# -----------------------------------------------------------------------------
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Build output of the static site generator (astro build -> dist/)
STATIC_DIR = os.getenv("STATIC_DIR", os.path.join(BASE_DIR, "dist"))

# Where the generator puts hashed asset files
ASSETS_PREFIX = "/" + (os.getenv("ASSETS_PREFIX") or "_astro").strip("/") + "/"

LOG_REQUESTS = (os.getenv("LOG_REQUESTS") or "").lower() in {"1", "true", "yes"}

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))

# -----------------------------------------------------------------------------
# Basic auth
# -----------------------------------------------------------------------------
# Read on every call rather than at import so the gate always sees the
# current environment. Missing values make every request fail with 500.
def basic_auth_credentials() -> BasicAuthCredentials:
    return BasicAuthCredentials(
        username=os.getenv("BASIC_AUTH_USER"),
        password=os.getenv("BASIC_AUTH_PASS"),
    )
