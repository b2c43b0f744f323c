"""Label handling: group keys for series and tag records for rows."""
from typing import Dict, FrozenSet, Iterable, Literal, Tuple

from promtable.series import GroupKey

LabelOrder = Literal["input", "sorted"]

# Labels the exposition format reserves for histogram buckets and summary quantiles
BUCKET_LABEL = "le"
QUANTILE_LABEL = "quantile"


def build_group_key(
    labels: Dict[str, str],
    exclude: Iterable[str] = (),
    order: LabelOrder = "input"
) -> GroupKey:
    """
    Build the ordered key identifying one series.

    Args:
        labels: Sample labels in the order the parser reported them
        exclude: Label names that belong to the sample, not the series
        order: "input" keeps line order, "sorted" orders by label name

    Returns:
        Tuple of (name, value) pairs
    """
    excluded = set(exclude)
    items = [(k, v) for k, v in labels.items() if k not in excluded]

    if order == "sorted":
        items.sort(key=lambda item: item[0])
    elif order != "input":
        raise ValueError(f"Unknown label order: {order}")

    return tuple(items)


def series_identity(labels: Dict[str, str], exclude: Iterable[str] = ()) -> FrozenSet[Tuple[str, str]]:
    """Order-independent identity of a series, used to merge its sample lines."""
    excluded = set(exclude)
    return frozenset((k, v) for k, v in labels.items() if k not in excluded)


def extract_tags(key: GroupKey) -> Dict[str, str]:
    """Tags record for a row: one string field per label, values untouched."""
    return {name: value for name, value in key}


def label_key(key: GroupKey) -> str:
    """Human-readable form of a group key for log messages."""
    return ",".join(f"{k}={v}" for k, v in key)
