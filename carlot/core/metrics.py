import time
import uuid
import logging
from functools import wraps
from typing import Optional

from fastapi import HTTPException
from prometheus_client import Counter, Histogram, generate_latest
from prometheus_client.core import CollectorRegistry

logger = logging.getLogger(__name__)

# Prometheus Registry
REGISTRY = CollectorRegistry()

service_calls_total = Counter(
    'carlot_service_calls_total',
    'Total service method calls',
    ['status', 'service', 'method'],
    registry=REGISTRY
)

service_call_duration_seconds = Histogram(
    'carlot_service_call_duration_seconds',
    'Service method duration in seconds',
    ['service', 'method'],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=REGISTRY
)

validation_failures_total = Counter(
    'carlot_validation_failures_total',
    'Payloads rejected by the validation layer',
    ['kind'],
    registry=REGISTRY
)


def get_prometheus_metrics() -> bytes:
    return generate_latest(REGISTRY)


def track_performance(service_name: Optional[str] = None):
    """
    Decorator to automatically track service method performance

    Usage:
    @track_performance(service_name="VehicleService")
    async def my_method(self, param1, param2):
        # method implementation
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            correlation_id = str(uuid.uuid4())

            actual_service_name = service_name or (args[0].__class__.__name__ if args else "Unknown")
            method_name = func.__name__

            start_time = time.time()
            status = 'error'

            try:
                result = await func(*args, **kwargs)
                status = 'success'
                return result

            except HTTPException as e:
                # 4xx outcomes are the caller's mistake, not a service failure
                if e.status_code < 500:
                    status = 'rejected'
                    logger.debug(f"{actual_service_name}.{method_name} rejected with {e.status_code}")
                else:
                    logger.warning(f"Error in {actual_service_name}.{method_name}: {e.detail}")
                raise

            except Exception as e:
                logger.warning(f"Error in {actual_service_name}.{method_name}: {e}")
                raise

            finally:
                duration_seconds = time.time() - start_time

                service_calls_total.labels(
                    status=status,
                    service=actual_service_name,
                    method=method_name
                ).inc()
                service_call_duration_seconds.labels(
                    service=actual_service_name,
                    method=method_name
                ).observe(duration_seconds)

                logger.debug(
                    f"Method executed: {actual_service_name}.{method_name}",
                    extra={
                        'correlation_id': correlation_id,
                        'service_name': actual_service_name,
                        'method_name': method_name,
                        'duration_ms': duration_seconds * 1000,
                        'status': status,
                    }
                )

        return wrapper
    return decorator
