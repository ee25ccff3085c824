"""Self-monitoring metrics for the write client using prometheus_client."""
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

RESULT_SUCCESS = "success"
RESULT_SERVER_ERROR = "server_error"
RESULT_RESPONSE_ERROR = "response_error"
RESULT_TRANSPORT_ERROR = "transport_error"


class ClientMetrics:
    """Counters and timings for remote-write sends."""

    def __init__(self, registry=None, prefix="promwrite_"):
        # Use a private registry so the default process metrics are not mixed in
        if registry is None:
            registry = CollectorRegistry()
        self.registry = registry

        self.requests_total = Counter(
            f"{prefix}requests_total",
            "Total number of remote-write requests by result",
            ["result"],
            registry=registry
        )

        self.sent_bytes_total = Counter(
            f"{prefix}sent_bytes_total",
            "Total compressed payload bytes sent",
            registry=registry
        )

        self.request_duration_seconds = Histogram(
            f"{prefix}request_duration_seconds",
            "Duration of remote-write requests in seconds",
            buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 15.0],
            registry=registry
        )

    def record_result(self, result: str):
        """Record the outcome of one send."""
        self.requests_total.labels(result=result).inc()

    def record_sent_bytes(self, count: int):
        """Record payload bytes handed to the transport."""
        self.sent_bytes_total.inc(count)

    def record_duration(self, duration: float):
        """Record request duration."""
        self.request_duration_seconds.observe(duration)

    def render(self) -> str:
        """Render the registry in the text exposition format."""
        return generate_latest(self.registry).decode("utf-8")
