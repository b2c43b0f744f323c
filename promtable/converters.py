"""Per-kind converters turning metric groups into rows."""
from abc import ABC, abstractmethod
from typing import Iterable

from promtable.rows import HistogramRow, Row, SimpleRow, SummaryRow
from promtable.series import Bucket, MetricGroup, MetricKind, Quantile
from promtable.tags import extract_tags


class KindConverter(ABC):
    """Base class for metric kind converters."""

    def __init__(self, kind: MetricKind):
        self.kind = kind

    @abstractmethod
    def rows(self, group: MetricGroup) -> Iterable[Row]:
        """Produce one row per series of the group."""
        pass

    def _check_kind(self, group: MetricGroup):
        if group.kind != self.kind:
            raise ValueError(
                f"{type(self).__name__} for {self.kind.value} cannot convert "
                f"{group.kind.value} group '{group.name}'"
            )


class SimpleConverter(KindConverter):
    """Counters, gauges and untyped metrics: one value per series."""

    def rows(self, group: MetricGroup) -> Iterable[Row]:
        self._check_kind(group)

        for key, metric in group.payload.items():
            yield SimpleRow(group.name, self.kind, extract_tags(key), metric.value)


class HistogramConverter(KindConverter):
    """Histograms: cumulative buckets with sum and count."""

    def __init__(self):
        super().__init__(MetricKind.HISTOGRAM)

    def rows(self, group: MetricGroup) -> Iterable[Row]:
        self._check_kind(group)

        for key, metric in group.payload.items():
            yield HistogramRow(
                group.name,
                extract_tags(key),
                buckets=[Bucket(b.bucket, b.count) for b in metric.buckets],
                sum=metric.sum,
                count=metric.count,
            )


class SummaryConverter(KindConverter):
    """Summaries: precomputed quantiles with sum and count."""

    def __init__(self):
        super().__init__(MetricKind.SUMMARY)

    def rows(self, group: MetricGroup) -> Iterable[Row]:
        self._check_kind(group)

        for key, metric in group.payload.items():
            yield SummaryRow(
                group.name,
                extract_tags(key),
                quantiles=[Quantile(q.quantile, q.value) for q in metric.quantiles],
                sum=metric.sum,
                count=metric.count,
            )


def create_converter(kind: MetricKind) -> KindConverter:
    """Factory function to create the converter for a metric kind."""
    if kind in (MetricKind.COUNTER, MetricKind.GAUGE, MetricKind.UNTYPED):
        return SimpleConverter(kind)
    elif kind == MetricKind.HISTOGRAM:
        return HistogramConverter()
    elif kind == MetricKind.SUMMARY:
        return SummaryConverter()
    else:
        raise ValueError(f"Unknown metric kind: {kind}")
