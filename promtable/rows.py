"""Row variants, one per metric kind, and their record form."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from promtable.series import Bucket, MetricKind, Quantile


@dataclass
class SimpleRow:
    """Row for counters, gauges and untyped metrics."""
    name: str
    kind: MetricKind
    tags: Dict[str, str]
    value: float

    def to_record(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.kind.value,
            "tags": dict(self.tags),
            "value": self.value,
        }


@dataclass
class HistogramRow:
    """Row for one histogram series."""
    name: str
    tags: Dict[str, str]
    buckets: List[Bucket] = field(default_factory=list)
    sum: float = 0.0
    count: int = 0
    kind: MetricKind = MetricKind.HISTOGRAM

    def to_record(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.kind.value,
            "tags": dict(self.tags),
            "buckets": [
                {"bucket": b.bucket, "count": b.count} for b in self.buckets
            ],
            "sum": self.sum,
            "count": self.count,
        }


@dataclass
class SummaryRow:
    """Row for one summary series."""
    name: str
    tags: Dict[str, str]
    quantiles: List[Quantile] = field(default_factory=list)
    sum: float = 0.0
    count: int = 0
    kind: MetricKind = MetricKind.SUMMARY

    def to_record(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.kind.value,
            "tags": dict(self.tags),
            "quantiles": [
                {"quantile": q.quantile, "value": q.value} for q in self.quantiles
            ],
            "sum": self.sum,
            "count": self.count,
        }


Row = Union[SimpleRow, HistogramRow, SummaryRow]
