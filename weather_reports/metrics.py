"""Prometheus metrics shared by the API and the observation store."""

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "weather_reports_api_requests_total",
    "Total API requests",
    ["method", "endpoint", "status"]
)
REQUEST_DURATION = Histogram(
    "weather_reports_api_request_duration_seconds",
    "API request duration in seconds",
    ["method", "endpoint"]
)
STORE_OPERATION_DURATION = Histogram(
    "weather_reports_store_operation_duration_seconds",
    "Observation store operation duration in seconds",
    ["operation"]
)
REPORTS_CREATED = Counter(
    "weather_reports_created_total",
    "Weather reports stored"
)
REPORTS_DELETED = Counter(
    "weather_reports_deleted_total",
    "Weather reports deleted"
)
