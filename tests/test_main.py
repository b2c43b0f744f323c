#!/usr/bin/env python3
"""Command line entry point tests."""
import io
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from promtable.main import build_log_formatter, build_parser, main

TEXT = '# TYPE http_requests_total counter\nhttp_requests_total{method="GET"} 100\nhttp_requests_total{method="POST"} 4\n'


def test_convert_file_to_json(tmp_path, capsys):
    path = tmp_path / "scrape.prom"
    path.write_text(TEXT)

    assert main([str(path)]) == 0

    rows = json.loads(capsys.readouterr().out)
    assert [row["tags"]["method"] for row in rows] == ["GET", "POST"]
    assert rows[0] == {
        "name": "http_requests_total",
        "type": "Counter",
        "tags": {"method": "GET"},
        "value": 100.0,
    }


def test_convert_stdin_to_jsonl(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO(TEXT))

    assert main(["--format", "jsonl"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert json.loads(lines[1])["value"] == 4.0


def test_sorted_labels_from_config(tmp_path, capsys):
    config = tmp_path / "promtable.yaml"
    config.write_text("converter:\n  label_order: sorted\n")
    scrape = tmp_path / "scrape.prom"
    scrape.write_text('m{zone="eu",app="db"} 1\n')

    assert main(["--config", str(config), str(scrape)]) == 0

    rows = json.loads(capsys.readouterr().out)
    assert list(rows[0]["tags"].keys()) == ["app", "zone"]


def test_parse_failure_exit_code(tmp_path, capsys):
    path = tmp_path / "broken.prom"
    path.write_text('foo{bar="baz"} notanumber\n')

    assert main([str(path)]) == 2

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Conversion failed" in captured.err


def test_missing_input_file(tmp_path, capsys):
    assert main([str(tmp_path / "absent.prom")]) == 1
    assert "Error reading input" in capsys.readouterr().err


def test_bad_config_exit_code(tmp_path, capsys):
    config = tmp_path / "bad.yaml"
    config.write_text("converter:\n  label_order: shuffled\n")

    assert main(["--config", str(config)]) == 1
    assert "Error loading configuration" in capsys.readouterr().err


def test_parser_defaults():
    args = build_parser().parse_args([])

    assert args.input is None
    assert args.format == "json"
    assert args.serve is False


def test_json_log_lines_parse_with_quoted_messages():
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(build_log_formatter("json"))
    logger = logging.getLogger("promtable.tests.json_logs")
    logger.addHandler(handler)
    logger.propagate = False
    try:
        logger.warning('Parse failure: Invalid labels: a="1" b="2"')
        logger.info("plain message")
    finally:
        logger.removeHandler(handler)

    entries = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert len(entries) == 2
    assert entries[0]["message"] == 'Parse failure: Invalid labels: a="1" b="2"'
    assert entries[0]["level"] == "WARNING"
    assert entries[0]["logger"] == "promtable.tests.json_logs"
    assert "time" in entries[0]


def test_text_log_format():
    record = logging.LogRecord("promtable", logging.INFO, __file__, 1, "hello", None, None)
    assert build_log_formatter("text").format(record).endswith("| INFO     | promtable | hello")
