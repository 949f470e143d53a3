"""
Prometheus metrics blueprint for monitoring and observability.

This blueprint exposes a /metrics endpoint that returns metrics in Prometheus format.
Metrics include system stats (CPU, memory, disk), uptime, CMS reachability,
auth activity and HTTP request metrics.
"""

import time

import psutil
from flask import Blueprint, Response, g, request
from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY,
)

from common.base.logging_config import get_logger
from common.cms import CMSError, get_cms_client

logger = get_logger(__name__)

metrics_bp = Blueprint('metrics', __name__)

# Endpoint label for requests that matched no route
UNMATCHED_ENDPOINT = 'unmatched'

# Track server start time
_SERVER_START_TIME = time.time()

# System metrics
cpu_usage_gauge = Gauge(
    'inkwell_cpu_usage_percent',
    'Current CPU usage percentage'
)

memory_usage_gauge = Gauge(
    'inkwell_memory_usage_percent',
    'Current memory usage percentage'
)

memory_used_bytes = Gauge(
    'inkwell_memory_used_bytes',
    'Memory used in bytes'
)

disk_usage_gauge = Gauge(
    'inkwell_disk_usage_percent',
    'Current disk usage percentage'
)

# Application metrics
uptime_seconds = Gauge(
    'inkwell_uptime_seconds',
    'Server uptime in seconds'
)

cms_reachable = Gauge(
    'inkwell_cms_reachable',
    'CMS reachability (1=reachable, 0=unreachable)'
)

cms_errors_total = Counter(
    'inkwell_cms_errors_total',
    'CMS failures surfaced to users, by upstream status',
    ['status']
)

# Auth metrics
login_attempts_total = Counter(
    'inkwell_login_attempts_total',
    'Login and registration attempts',
    ['method', 'result']
)

logouts_total = Counter(
    'inkwell_logouts_total',
    'Total number of logouts'
)

# HTTP request metrics
http_requests_total = Counter(
    'inkwell_http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'inkwell_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)


def record_login(method: str, success: bool) -> None:
    """
    Count a login attempt.

    :param method: "password" for login, "register" for sign-up
    :param success: Whether the CMS accepted the credentials
    """
    login_attempts_total.labels(method=method, result='success' if success else 'failure').inc()


def record_logout() -> None:
    logouts_total.inc()


def record_cms_error(status) -> None:
    cms_errors_total.labels(status=str(status) if status is not None else 'unreachable').inc()


def update_system_metrics():
    """Update system-level metrics (CPU, memory, disk)."""
    try:
        cpu_usage_gauge.set(psutil.cpu_percent(interval=0.1))

        memory = psutil.virtual_memory()
        memory_usage_gauge.set(memory.percent)
        memory_used_bytes.set(memory.used)

        disk_usage_gauge.set(psutil.disk_usage('/').percent)
    except Exception as e:
        logger.warning(f"Error updating system metrics: {e}")


def update_cms_metrics():
    """Probe the CMS with the cheapest list query."""
    try:
        get_cms_client().get('api/blogs?pagination[pageSize]=1')
        cms_reachable.set(1)
    except CMSError as e:
        logger.warning(f"CMS reachability check failed: {e}")
        cms_reachable.set(0)


@metrics_bp.route('/metrics')
def metrics():
    """
    Prometheus metrics endpoint.

    Unauthenticated so Prometheus scrapers can reach it.

    :return: Prometheus-formatted metrics response
    """
    update_system_metrics()
    uptime_seconds.set(time.time() - _SERVER_START_TIME)
    update_cms_metrics()

    return Response(
        generate_latest(REGISTRY),
        mimetype=CONTENT_TYPE_LATEST
    )


def setup_request_metrics(app):
    """
    Set up request timing middleware for HTTP metrics.

    :param app: Flask application instance
    """
    @app.before_request
    def start_timer():
        g.metrics_start_time = time.time()

    @app.after_request
    def record_request(response):
        # Skip metrics endpoint to avoid recursion
        if request.endpoint == 'metrics.metrics':
            return response

        if hasattr(g, 'metrics_start_time'):
            duration = time.time() - g.metrics_start_time
            # One label for every path that matched no route
            endpoint = request.endpoint or UNMATCHED_ENDPOINT

            http_requests_total.labels(
                method=request.method,
                endpoint=endpoint,
                status=response.status_code
            ).inc()

            http_request_duration_seconds.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(duration)

        return response
