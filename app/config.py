import os

# Read from environment with sensible defaults
HOST = os.getenv("FAVICON_HOST", "0.0.0.0")
PORT = int(os.getenv("FAVICON_PORT", "8080"))

REQUEST_TIMEOUT = float(os.getenv("FAVICON_REQUEST_TIMEOUT", "5"))  # seconds
# Extra time the timeout wrapper allows past the request deadline so handlers
# can still answer with the entries that failed on the deadline.
REQUEST_TIMEOUT_GRACE = float(os.getenv("FAVICON_REQUEST_TIMEOUT_GRACE", "0.5"))

FETCH_TIMEOUT = float(os.getenv("FAVICON_FETCH_TIMEOUT", "10"))  # seconds
MAX_REDIRECTS = int(os.getenv("FAVICON_MAX_REDIRECTS", "10"))
# 0 disables the cap
MAX_CONTENT_SIZE = int(os.getenv("FAVICON_MAX_CONTENT_SIZE", "0"))

KEEP_ALIVE_TIMEOUT = int(os.getenv("FAVICON_KEEP_ALIVE_TIMEOUT", "60"))
SHUTDOWN_TIMEOUT = int(os.getenv("FAVICON_SHUTDOWN_TIMEOUT", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
