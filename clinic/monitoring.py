# /clinic/monitoring.py
import time

from flask import Response, current_app, g, request
from prometheus_client import (
    CONTENT_TYPE_LATEST, CollectorRegistry, Gauge, Histogram, PlatformCollector, ProcessCollector,
    generate_latest,
)


class Monitoring:
    """Request duration and in-flight metrics, exposed at ``/metrics``.

    Every app gets its own registry so test apps do not share counters.
    """
    def __init__(self, app=None):
        self.registry = CollectorRegistry()
        ProcessCollector(registry=self.registry)
        PlatformCollector(registry=self.registry)

        self.request_duration = Histogram(
            'http_request_duration_seconds',
            'Duration of HTTP requests in seconds',
            ['method', 'route', 'status_code'],
            buckets=(0.1, 0.3, 0.5, 0.7, 1, 3, 5, 7, 10),
            registry=self.registry,
        )
        self.active_connections = Gauge(
            'active_connections',
            'Number of active connections',
            registry=self.registry,
        )
        if app:
            self.init_app(app)

    def init_app(self, app):
        app.before_request(self._before_request)
        app.after_request(self._after_request)
        app.teardown_request(self._teardown_request)
        app.add_url_rule('/metrics', 'metrics', self.metrics_view, methods=['GET'])
        app.extensions['monitoring'] = self

    def _before_request(self):
        g._monitoring_start = time.perf_counter()
        self.active_connections.inc()

    def _after_request(self, response):
        start = g.pop('_monitoring_start', None)
        if start is None:
            return response

        duration = time.perf_counter() - start
        # Label by the matched rule so /api/appointments/1 and /2 share a series
        route = request.url_rule.rule if request.url_rule else request.path
        self.request_duration.labels(request.method, route, str(response.status_code)).observe(duration)
        self.active_connections.dec()
        g._monitoring_done = True

        current_app.logger.info(
            f"method={request.method} path={request.path} status={response.status_code} duration={duration:.4f}s"
        )
        return response

    def _teardown_request(self, exc):
        # after_request does not run when the view raised past the error handlers
        if not g.pop('_monitoring_done', False) and g.pop('_monitoring_start', None) is not None:
            self.active_connections.dec()

    def metrics_view(self):
        return Response(generate_latest(self.registry), content_type=CONTENT_TYPE_LATEST)
