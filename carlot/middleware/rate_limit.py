from fastapi import Request
from fastapi.responses import JSONResponse
from prometheus_client import Counter
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from carlot.core.environment import rate_limit_enabled
from carlot.core.metrics import REGISTRY

AUTH_RATE_LIMIT = "10/minute"

limiter = Limiter(
    key_func=get_remote_address,
    enabled=rate_limit_enabled(),
    # storage_uri="redis://localhost:6379" once more than one worker runs
)

# Metric for monitoring
rate_limit_exceeded_counter = Counter(
    'carlot_rate_limit_exceeded_total',
    'Total rate limit violations',
    ['endpoint'],
    registry=REGISTRY,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    rate_limit_exceeded_counter.labels(endpoint=request.url.path).inc()
    return JSONResponse(
        status_code=429,
        content={"error": "Rate limit exceeded. Please try again later."},
    )
