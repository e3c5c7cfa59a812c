from __future__ import annotations
from prometheus_client import Counter, Histogram, Gauge, Info, generate_latest, CONTENT_TYPE_LATEST
from sdkgen import __version__
from sdkgen.obs.logging_setup import get_logger

logger = get_logger(__name__)

REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

SDK_JOBS_TOTAL = Counter(
    'sdk_jobs_total',
    'Total SDK generation jobs by terminal status',
    ['status', 'kind']
)

SDK_JOB_DURATION = Histogram(
    'sdk_job_duration_seconds',
    'SDK generation job duration in seconds',
    ['status']
)

ANALYSIS_ATTEMPTS = Counter(
    'analysis_attempts_total',
    'External analysis attempts by outcome',
    ['outcome']
)

ANALYSIS_RESULTS = Counter(
    'analysis_results_total',
    'Analysis results by producing path',
    ['source', 'provider_type']
)

ACTIVE_JOBS = Gauge(
    'active_jobs',
    'Number of non-terminal jobs'
)

PROGRESS_SUBSCRIBERS = Gauge(
    'progress_subscribers',
    'Number of registered progress subscribers'
)

PROCESS_MEMORY_BYTES = Gauge(
    'process_memory_bytes',
    'Resident memory of the service process'
)

PROCESS_CPU_PERCENT = Gauge(
    'process_cpu_percent',
    'CPU usage of the service process'
)

SERVICE_INFO = Info(
    'service_info',
    'Service information'
)

class PrometheusMetrics:
    """Prometheus metrics collector with convenience methods."""

    def __init__(self):
        SERVICE_INFO.info({
            'version': __version__,
            'service': 'sdk-generator',
        })
        logger.info("Prometheus metrics initialized")

    def record_request(self, method: str, endpoint: str, status_code: int, duration_seconds: float):
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=str(status_code)).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration_seconds)

    def record_job(self, status: str, kind: str, duration_seconds: float):
        SDK_JOBS_TOTAL.labels(status=status, kind=kind).inc()
        SDK_JOB_DURATION.labels(status=status).observe(duration_seconds)

    def record_analysis_attempt(self, outcome: str):
        ANALYSIS_ATTEMPTS.labels(outcome=outcome).inc()

    def record_analysis_result(self, source: str, provider_type: str):
        ANALYSIS_RESULTS.labels(source=source, provider_type=provider_type).inc()

    def update_active_jobs(self, count: int):
        ACTIVE_JOBS.set(count)

    def update_subscribers(self, count: int):
        PROGRESS_SUBSCRIBERS.set(count)

    def update_system_metrics(self, memory_bytes: int, cpu_percent: float):
        PROCESS_MEMORY_BYTES.set(memory_bytes)
        PROCESS_CPU_PERCENT.set(cpu_percent)

    def get_prometheus_metrics(self) -> bytes:
        return generate_latest()

    def get_content_type(self) -> str:
        return CONTENT_TYPE_LATEST

# Global Prometheus metrics instance
prometheus_metrics = PrometheusMetrics()
