"""Read exposition text into metric groups using the prometheus_client parser."""
import logging
import math
from typing import Callable, Dict, FrozenSet, List, Tuple

from prometheus_client.metrics_core import Metric
from prometheus_client.parser import text_string_to_metric_families
from prometheus_client.samples import Sample

from promtable.errors import ParseError
from promtable.series import (
    Bucket, GroupKey, HistogramMetric, MetricGroup, MetricKind,
    Quantile, SeriesMetric, SimpleMetric, SummaryMetric
)
from promtable.tags import (
    BUCKET_LABEL, QUANTILE_LABEL, LabelOrder, build_group_key, label_key, series_identity
)

logger = logging.getLogger(__name__)

# prometheus_client reports families without a TYPE line as "unknown"
FAMILY_KINDS = {
    "counter": MetricKind.COUNTER,
    "gauge": MetricKind.GAUGE,
    "histogram": MetricKind.HISTOGRAM,
    "summary": MetricKind.SUMMARY,
    "unknown": MetricKind.UNTYPED,
    "untyped": MetricKind.UNTYPED,
}


def _family_kind(family: Metric) -> MetricKind:
    kind = FAMILY_KINDS.get(family.type)
    if kind is None:
        raise ParseError(f"Unsupported metric type '{family.type}' for metric {family.name}")
    return kind


def _group_name(family: Metric, kind: MetricKind) -> str:
    # The parser strips "_total" from counter families but keeps it on samples.
    # A counter declared without the suffix has its samples renamed to
    # "<name>_total", so the row name then differs from the input text.
    if kind == MetricKind.COUNTER:
        return f"{family.name}_total"
    return family.name


def _to_count(sample: Sample) -> int:
    """Counts are unsigned integers in the exposition model."""
    value = sample.value
    if not math.isfinite(value) or value < 0 or value != int(value):
        raise ParseError(f"Invalid count value {value!r} for sample {sample.name}")
    return int(value)


def _float_label(sample: Sample, label: str) -> float:
    raw = sample.labels.get(label)
    if raw is None:
        raise ParseError(f"Sample {sample.name} is missing the '{label}' label")
    try:
        return float(raw)
    except ValueError:
        raise ParseError(f"Invalid {label} value '{raw}' for sample {sample.name}") from None


class GroupAccumulator:
    """Collects the samples of one metric group, series by series."""

    def __init__(self, name: str, kind: MetricKind, label_order: LabelOrder = "input"):
        self.name = name
        self.kind = kind
        self.label_order = label_order
        self.series: Dict[FrozenSet[Tuple[str, str]], Tuple[GroupKey, SeriesMetric]] = {}

    def add_family(self, family: Metric):
        """Fold every sample of a parsed family into this group."""
        if self.kind == MetricKind.HISTOGRAM:
            add = self._add_histogram_sample
        elif self.kind == MetricKind.SUMMARY:
            add = self._add_summary_sample
        else:
            add = self._add_simple_sample

        for sample in family.samples:
            add(family.name, sample)

    def build(self) -> MetricGroup:
        payload = {key: metric for key, metric in self.series.values()}
        return MetricGroup(self.name, self.kind, payload)

    def _series(self, labels: Dict[str, str], exclude: Tuple[str, ...], factory: Callable[[], SeriesMetric]):
        identity = series_identity(labels, exclude)
        entry = self.series.get(identity)
        if entry is None:
            key = build_group_key(labels, exclude, self.label_order)
            entry = (key, factory())
            self.series[identity] = entry
        return entry[1]

    def _add_simple_sample(self, base: str, sample: Sample):
        identity = series_identity(sample.labels)
        existing = self.series.get(identity)
        if existing is not None:
            key = existing[0]
            logger.debug(f"Duplicate series {{{label_key(key)}}} for {self.name}, keeping the last value")
        else:
            key = build_group_key(sample.labels, (), self.label_order)
        self.series[identity] = (key, SimpleMetric(float(sample.value)))

    def _add_histogram_sample(self, base: str, sample: Sample):
        exclude = (BUCKET_LABEL,)

        if sample.name == f"{base}_bucket":
            metric = self._series(sample.labels, exclude, HistogramMetric)
            metric.buckets.append(
                Bucket(_float_label(sample, BUCKET_LABEL), _to_count(sample))
            )
        elif sample.name == f"{base}_sum":
            metric = self._series(sample.labels, exclude, HistogramMetric)
            metric.sum = float(sample.value)
        elif sample.name == f"{base}_count":
            metric = self._series(sample.labels, exclude, HistogramMetric)
            metric.count = _to_count(sample)
        else:
            logger.debug(f"Ignoring sample {sample.name} in histogram {base}")

    def _add_summary_sample(self, base: str, sample: Sample):
        exclude = (QUANTILE_LABEL,)

        if sample.name == base:
            quantile = _float_label(sample, QUANTILE_LABEL)
            metric = self._series(sample.labels, exclude, SummaryMetric)
            metric.quantiles.append(Quantile(quantile, float(sample.value)))
        elif sample.name == f"{base}_sum":
            metric = self._series(sample.labels, exclude, SummaryMetric)
            metric.sum = float(sample.value)
        elif sample.name == f"{base}_count":
            metric = self._series(sample.labels, exclude, SummaryMetric)
            metric.count = _to_count(sample)
        else:
            logger.debug(f"Ignoring sample {sample.name} in summary {base}")


def parse_text(text: str, label_order: LabelOrder = "input") -> List[MetricGroup]:
    """
    Parse exposition text into one MetricGroup per metric name.

    Groups keep the order in which their metric first appears; series keep
    the order in which their label set first appears.

    Raises:
        ParseError: if the parser rejects the text or a sample cannot be
            mapped onto its metric kind
    """
    if label_order not in ("input", "sorted"):
        raise ValueError(f"Unknown label order: {label_order}")

    accumulators: Dict[Tuple[str, MetricKind], GroupAccumulator] = {}

    try:
        for family in text_string_to_metric_families(text):
            kind = _family_kind(family)
            name = _group_name(family, kind)

            # Untyped lines arrive as one family per sample; fold them back together
            accumulator = accumulators.get((name, kind))
            if accumulator is None:
                accumulator = GroupAccumulator(name, kind, label_order)
                accumulators[(name, kind)] = accumulator

            accumulator.add_family(family)
    except ParseError:
        raise
    except (ValueError, IndexError) as e:
        raise ParseError(str(e) or "Invalid Prometheus exposition text") from e

    groups = [acc.build() for acc in accumulators.values()]
    logger.debug(f"Parsed {len(groups)} metric groups")
    return groups
