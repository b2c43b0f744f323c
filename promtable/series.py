"""Data structures for parsed metric groups and their series."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple, Union


class MetricKind(str, Enum):
    """Metric kind of a group, spelled the way rows report it."""
    COUNTER = "Counter"
    GAUGE = "Gauge"
    HISTOGRAM = "Histogram"
    SUMMARY = "Summary"
    UNTYPED = "Untyped"


# Ordered (label name, label value) pairs identifying one series in a group
GroupKey = Tuple[Tuple[str, str], ...]


@dataclass
class SimpleMetric:
    """Counter, gauge or untyped sample value."""
    value: float


@dataclass
class Bucket:
    """Cumulative histogram bucket."""
    bucket: float
    count: int


@dataclass
class HistogramMetric:
    """Histogram series: buckets plus _sum and _count."""
    buckets: List[Bucket] = field(default_factory=list)
    sum: float = 0.0
    count: int = 0


@dataclass
class Quantile:
    """Precomputed summary quantile."""
    quantile: float
    value: float


@dataclass
class SummaryMetric:
    """Summary series: quantiles plus _sum and _count."""
    quantiles: List[Quantile] = field(default_factory=list)
    sum: float = 0.0
    count: int = 0


SeriesMetric = Union[SimpleMetric, HistogramMetric, SummaryMetric]


@dataclass
class MetricGroup:
    """All series sharing one metric name."""
    name: str
    kind: MetricKind
    payload: Dict[GroupKey, SeriesMetric] = field(default_factory=dict)

    def series_count(self) -> int:
        return len(self.payload)
