"""Self-monitoring metrics for the conversion service, using prometheus_client."""
from typing import Dict, List

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest


class SelfMetrics:
    """Self-monitoring metrics for conversions served by the API."""

    def __init__(self, registry=None, prefix="promtable_"):
        if registry is None:
            registry = CollectorRegistry()
        self.registry = registry

        self.conversions_total = Counter(
            f"{prefix}conversions_total",
            "Total number of conversion requests by outcome",
            ["outcome"],
            registry=registry
        )

        self.rows_total = Counter(
            f"{prefix}rows_total",
            "Total number of rows produced",
            ["kind"],
            registry=registry
        )

        self.conversion_duration_seconds = Histogram(
            f"{prefix}conversion_duration_seconds",
            "Duration of each conversion in seconds",
            buckets=[0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
            registry=registry
        )

        self.input_bytes = Histogram(
            f"{prefix}input_bytes",
            "Size of converted exposition text in bytes",
            buckets=[256, 1024, 4096, 16384, 65536, 262144, 1048576, 4194304],
            registry=registry
        )

    def record_success(self, records: List[Dict], input_size: int, duration: float):
        """Record a successful conversion."""
        self.conversions_total.labels(outcome="success").inc()
        self.input_bytes.observe(input_size)
        self.conversion_duration_seconds.observe(duration)

        per_kind: Dict[str, int] = {}
        for record in records:
            per_kind[record["type"]] = per_kind.get(record["type"], 0) + 1
        for kind, count in per_kind.items():
            self.rows_total.labels(kind=kind).inc(count)

    def record_failure(self, outcome: str):
        """Record a failed conversion ("invalid_input" or "parse_failure")."""
        self.conversions_total.labels(outcome=outcome).inc()

    def exposition(self) -> bytes:
        """Current metrics in the Prometheus text format."""
        return generate_latest(self.registry)
