"""Rate limiting configuration."""
import os
from slowapi import Limiter
from slowapi.util import get_remote_address


def get_client_ip(request):
    """Get client IP for rate limiting, considering proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()

    return get_remote_address(request)


def get_station_key(request):
    """Rate limit scans per station rather than per IP.

    Stations at one venue usually share a single NAT address.
    """
    station_id = request.path_params.get("station_id")
    if station_id:
        return f"station:{station_id}"
    return get_client_ip(request)


# Uses Redis if REDIS_URL is set, falls back to memory for local dev
limiter = Limiter(
    key_func=get_client_ip,
    default_limits=["300/minute"],
    storage_uri=os.getenv("REDIS_URL", "memory://"),
    strategy="fixed-window"
)

RATE_LIMITS = {
    # One station scans at most a badge every second or two; this is a runaway guard
    "scan": "120/minute",
    "station_control": "120/minute",

    # Dashboards polling for figures
    "read": "300/minute",
}
