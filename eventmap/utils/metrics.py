"""
Prometheus Metrics for the Event Map Service
Exposes metrics for event curation, external lookups, and API performance.
"""
from prometheus_client import Counter, Histogram, Info, generate_latest, CONTENT_TYPE_LATEST

from eventmap import __version__


# =============================================================================
# Application Info
# =============================================================================
app_info = Info('eventmap', 'Event Map Service Information')
app_info.info({
    'version': __version__,
    'service': 'eventmap-backend',
})


# =============================================================================
# API Request Metrics
# =============================================================================
http_requests_total = Counter(
    'eventmap_http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'eventmap_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)


# =============================================================================
# Engine Metrics
# =============================================================================
event_operations_total = Counter(
    'eventmap_event_operations_total',
    'Total event operations',
    ['operation', 'outcome']  # operation: create, update, delete, bulk_item, favorite, reorder
)

collection_operations_total = Counter(
    'eventmap_collection_operations_total',
    'Total collection operations',
    ['operation', 'outcome']  # operation: create, delete, activate
)

reorder_size = Histogram(
    'eventmap_reorder_size',
    'Number of events re-sequenced per reorder',
    buckets=[1, 5, 10, 25, 50, 100, 250, 500]
)


# =============================================================================
# External Service Metrics
# =============================================================================
geocode_requests_total = Counter(
    'eventmap_geocode_requests_total',
    'Total geocoding requests',
    ['outcome']  # resolved, not_found, error
)

route_requests_total = Counter(
    'eventmap_route_requests_total',
    'Total routing requests',
    ['mode', 'outcome']
)

external_request_duration_seconds = Histogram(
    'eventmap_external_request_duration_seconds',
    'External service call duration in seconds',
    ['service'],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
)


# =============================================================================
# Helper Functions
# =============================================================================
def get_metrics():
    """Generate metrics in Prometheus format"""
    return generate_latest()


def get_content_type():
    """Get the content type for Prometheus metrics"""
    return CONTENT_TYPE_LATEST


def record_http_request(method: str, endpoint: str, status_code: int, duration: float):
    """Record a finished HTTP request"""
    http_requests_total.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)


def record_event_operation(operation: str, outcome: str = "ok"):
    """Record an event operation"""
    event_operations_total.labels(operation=operation, outcome=outcome).inc()


def record_collection_operation(operation: str, outcome: str = "ok"):
    """Record a collection operation"""
    collection_operations_total.labels(operation=operation, outcome=outcome).inc()


def record_reorder(size: int):
    """Record the size of a reorder"""
    reorder_size.observe(size)


def record_geocode(outcome: str, duration: float):
    """Record a geocoding call"""
    geocode_requests_total.labels(outcome=outcome).inc()
    external_request_duration_seconds.labels(service='geocoder').observe(duration)


def record_route(mode: str, outcome: str, duration: float):
    """Record a routing call"""
    route_requests_total.labels(mode=mode, outcome=outcome).inc()
    external_request_duration_seconds.labels(service='router').observe(duration)
