#!/usr/bin/env python3
"""JSON rendering of row records."""
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from promtable.builder import MetricRowBuilder
from promtable.output import jsonable, render_json, render_jsonl

TEXT = """\
# TYPE h histogram
h_bucket{le="1"} 1
h_bucket{le="+Inf"} 2
h_sum 3
h_count 2
# TYPE g gauge
g NaN
"""


def test_non_finite_floats_use_exposition_spelling():
    records = MetricRowBuilder().convert(TEXT)
    data = json.loads(render_json(records))

    assert data[0]["buckets"][1]["bucket"] == "+Inf"
    assert data[0]["buckets"][0]["bucket"] == 1.0
    assert data[1]["value"] == "NaN"
    assert jsonable(float("-inf")) == "-Inf"


def test_rows_are_not_modified():
    records = MetricRowBuilder().convert(TEXT)
    render_json(records)

    assert records[0]["buckets"][1]["bucket"] == float("inf")


def test_jsonl_one_record_per_line():
    records = MetricRowBuilder().convert(TEXT)
    lines = render_jsonl(records).splitlines()

    assert len(lines) == 2
    assert json.loads(lines[0])["type"] == "Histogram"
    assert json.loads(lines[1])["type"] == "Gauge"


def test_empty_output():
    assert render_json([]) == "[]"
    assert render_jsonl([]) == ""
