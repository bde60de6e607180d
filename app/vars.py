import os

SERVICE_NAME = os.getenv("SERVICE_NAME", "brawl-stars-proxy")
SERVICE_VERSION = "1.0.0"
HOST = os.environ.get("HOST", "0.0.0.0")

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")

DEFAULT_PORT = 10000
DEFAULT_UPSTREAM_URL = "https://api.brawlstars.com/v1"
DEFAULT_UPSTREAM_TIMEOUT = 10.0
DEFAULT_RATE_LIMIT = "100/15 minutes"
USER_AGENT = "BrawlStarsProxy/1.0"

# Origins the React frontend is usually served from during development
DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:3001",
    "https://localhost:3000",
)
