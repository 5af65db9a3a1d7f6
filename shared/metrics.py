"""
Shared metrics configuration for the catalog cache service.
"""

from prometheus_client import Counter, Histogram, Info, CollectorRegistry, REGISTRY
from typing import Dict, Any, Optional
import time
import threading
from contextlib import contextmanager


class MetricsCollector:
    """Centralized metrics collector for services."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type", "service"],
            registry=self.registry
        )

        self._setup_purge_metrics()

    def _setup_purge_metrics(self):
        """Set up CDN purge metrics."""
        self._metrics["cdn_purge_requests_total"] = Counter(
            "cdn_purge_requests_total",
            "Total purge requests sent to a CDN",
            ["provider", "status"],
            registry=self.registry
        )

        self._metrics["cdn_purge_keys_total"] = Counter(
            "cdn_purge_keys_total",
            "Total surrogate keys submitted for purging",
            ["provider"],
            registry=self.registry
        )

        self._metrics["cdn_purge_skipped_total"] = Counter(
            "cdn_purge_skipped_total",
            "Total purge invocations skipped without contacting a CDN",
            ["reason"],
            registry=self.registry
        )

        self._metrics["cdn_purge_duration_seconds"] = Histogram(
            "cdn_purge_duration_seconds",
            "Duration of a CDN purge invocation in seconds",
            ["provider"],
            registry=self.registry
        )

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_error(self, error_type: str, service: Optional[str] = None):
        """Record error metrics."""
        service_name = service or self.service_name
        self._metrics["errors_total"].labels(error_type=error_type, service=service_name).inc()

    def record_purge_request(self, provider: str, status: str, key_count: int):
        """Record one purge request sent to a CDN."""
        self._metrics["cdn_purge_requests_total"].labels(provider=provider, status=status).inc()
        self._metrics["cdn_purge_keys_total"].labels(provider=provider).inc(key_count)

    def record_purge_skipped(self, reason: str):
        """Record a purge that was skipped."""
        self._metrics["cdn_purge_skipped_total"].labels(reason=reason).inc()

    @contextmanager
    def time_operation(self, operation_name: str, **labels):
        """Context manager to time an operation."""
        start_time = time.time()
        try:
            yield
        finally:
            duration = time.time() - start_time
            if operation_name in self._metrics:
                self._metrics[operation_name].labels(**labels).observe(duration)


_collectors: Dict[str, MetricsCollector] = {}
_collectors_lock = threading.Lock()


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = REGISTRY) -> MetricsCollector:
    """Get the metrics collector for a service, creating it on first use."""
    with _collectors_lock:
        collector = _collectors.get(service_name)
        if collector is None:
            collector = MetricsCollector(service_name, registry)
            _collectors[service_name] = collector
        return collector
