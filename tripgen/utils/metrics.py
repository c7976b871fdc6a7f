"""Prometheus metrics for the generation pipeline."""

from prometheus_client import Counter, Histogram

generation_attempts_total = Counter(
    "generation_attempts_total",
    "Text-generation provider attempts",
    ["provider", "outcome"],
)

generation_latency_ms = Histogram(
    "generation_latency_ms",
    "Text-generation provider latency in milliseconds",
    ["provider"],
    buckets=[500, 1000, 2000, 5000, 10000, 20000, 40000, 80000],
)

quote_lookups_total = Counter(
    "quote_lookups_total",
    "Price quote lookups by resulting source",
    ["source"],
)

credits_deducted_total = Counter(
    "credits_deducted_total",
    "Credits deducted by action",
    ["action"],
)

persistence_failures_total = Counter(
    "persistence_failures_total",
    "Best-effort persistence writes that failed",
    ["operation"],
)


class PrometheusPipelineMetrics:
    """Prometheus-based pipeline metrics implementation."""

    def record_generation(self, provider: str, outcome: str, latency_ms: float) -> None:
        """Record one provider attempt."""
        generation_attempts_total.labels(provider=provider, outcome=outcome).inc()
        generation_latency_ms.labels(provider=provider).observe(latency_ms)

    def inc_quote_lookup(self, source: str) -> None:
        """Count a quote lookup outcome."""
        quote_lookups_total.labels(source=source).inc()

    def inc_credit_deducted(self, action: str) -> None:
        """Count a successful credit deduction."""
        credits_deducted_total.labels(action=action).inc()

    def inc_persistence_failure(self, operation: str) -> None:
        """Count a swallowed persistence failure."""
        persistence_failures_total.labels(operation=operation).inc()


metrics = PrometheusPipelineMetrics()
