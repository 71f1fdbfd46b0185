"""Prometheus metrics for generation, credits and claims."""

from prometheus_client import Counter, Histogram

generation_latency_ms = Histogram(
    "generation_latency_ms",
    "Document generation latency in milliseconds",
    ["template", "outcome"],
    buckets=[100, 250, 500, 1000, 2000, 4000, 8000, 16000],
)

generation_errors_total = Counter(
    "generation_errors_total",
    "Total document generation errors",
    ["reason"],
)

credits_debited_total = Counter(
    "credits_debited_total",
    "Total credits debited",
    ["source"],
)

document_claims_total = Counter(
    "document_claims_total",
    "Total guest document claim attempts",
    ["outcome"],
)


class WorkflowMetrics:
    """Interface for workflow metrics (no-op default)."""

    def record_generation(self, template: str, outcome: str, latency_ms: float) -> None:
        """Record generation latency."""
        pass

    def inc_generation_error(self, reason: str) -> None:
        """Increment generation error counter."""
        pass

    def inc_credits_debited(self, source: str, amount: int = 1) -> None:
        """Increment debited-credit counter."""
        pass

    def inc_claim(self, outcome: str) -> None:
        """Increment claim counter."""
        pass


class PrometheusWorkflowMetrics(WorkflowMetrics):
    """Prometheus-based workflow metrics implementation."""

    def record_generation(self, template: str, outcome: str, latency_ms: float) -> None:
        """Record generation latency."""
        generation_latency_ms.labels(template=template, outcome=outcome).observe(latency_ms)

    def inc_generation_error(self, reason: str) -> None:
        """Increment generation error counter."""
        generation_errors_total.labels(reason=reason).inc()

    def inc_credits_debited(self, source: str, amount: int = 1) -> None:
        """Increment debited-credit counter."""
        credits_debited_total.labels(source=source).inc(amount)

    def inc_claim(self, outcome: str) -> None:
        """Increment claim counter."""
        document_claims_total.labels(outcome=outcome).inc()
