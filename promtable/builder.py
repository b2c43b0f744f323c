"""MetricRowBuilder: exposition text in, tabular rows out."""
import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence

from promtable.config import ConverterConfig
from promtable.converters import KindConverter, create_converter
from promtable.errors import InvalidInputType, ParseError, ParseFailure
from promtable.groups import parse_text
from promtable.rows import Row
from promtable.series import MetricGroup, MetricKind

logger = logging.getLogger(__name__)


class MetricRowBuilder:
    """Converts Prometheus exposition text into one row per series."""

    def __init__(self, config: Optional[ConverterConfig] = None):
        self.config = config or ConverterConfig()
        self.converters: Dict[MetricKind, KindConverter] = {
            kind: create_converter(kind) for kind in MetricKind
        }

    def convert(self, text: Any) -> List[Dict[str, Any]]:
        """
        Convert exposition text into row records.

        Args:
            text: Prometheus exposition text

        Returns:
            List of records, groups in input order, series in input order

        Raises:
            InvalidInputType: if text is not a str
            ParseFailure: if the parser rejects the text
        """
        if not isinstance(text, str):
            raise InvalidInputType(type(text))

        try:
            groups = parse_text(text, self.config.label_order)
        except ParseError as e:
            raise ParseFailure(e.message) from e

        return self.convert_groups(groups)

    def convert_groups(self, groups: Sequence[MetricGroup]) -> List[Dict[str, Any]]:
        """Convert already parsed groups into row records."""
        records = [row.to_record() for row in self.iter_rows(groups)]
        logger.debug(f"Converted {len(groups)} metric groups into {len(records)} rows")
        return records

    def iter_rows(self, groups: Sequence[MetricGroup]) -> Iterator[Row]:
        """Yield typed rows, flattening groups in order."""
        for group in groups:
            yield from self.converters[group.kind].rows(group)
