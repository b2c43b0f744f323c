"""Main entry point for the exposition-to-rows converter."""
import argparse
import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from promtable.api import ConversionAPI
from promtable.builder import MetricRowBuilder
from promtable.config import load_config
from promtable.errors import ConversionError
from promtable.output import render_json, render_jsonl


def build_log_formatter(log_format: str) -> logging.Formatter:
    """Formatter for the configured log format ("json" or "text")."""
    if log_format == "json":
        return JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"asctime": "time", "levelname": "level", "name": "logger"},
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    return logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def setup_logging(log_level: str, log_format: str):
    """Setup logging configuration."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    # stdout carries the rows, so logs go to stderr
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(build_log_formatter(log_format))

    logging.basicConfig(level=level, handlers=[handler])

    # Reduce noise from some libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="promtable",
        description="Convert Prometheus exposition text into rows"
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="File with exposition text (default: stdin)"
    )
    parser.add_argument(
        "--config",
        "-c",
        help="Path to configuration YAML file"
    )
    parser.add_argument(
        "--format",
        "-f",
        choices=["json", "jsonl"],
        default="json",
        help="Output format"
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=None,
        help="Indentation for json output"
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP conversion API instead of converting input"
    )
    return parser


def main(argv=None) -> int:
    """Main function."""
    args = build_parser().parse_args(argv)

    # Load configuration
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(config.global_.log_level, config.global_.log_format)
    logger = logging.getLogger(__name__)

    builder = MetricRowBuilder(config.converter)

    if args.serve:
        if not config.api.enabled:
            logger.error("API is disabled in configuration")
            return 1

        api = ConversionAPI(builder, config.api)
        logger.info(f"Starting conversion API on {config.api.bind_address}:{config.api.port}")
        api.run(host=config.api.bind_address, port=config.api.port)
        return 0

    if args.input:
        logger.debug(f"Reading exposition text from {args.input}")
        try:
            with open(args.input, "r", encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error reading input: {e}", file=sys.stderr)
            return 1
    else:
        text = sys.stdin.read()

    try:
        records = builder.convert(text)
    except ConversionError as e:
        print(f"Conversion failed: {e}", file=sys.stderr)
        return 2

    logger.info(f"Converted input into {len(records)} rows")

    if args.format == "jsonl":
        sys.stdout.write(render_jsonl(records))
    else:
        sys.stdout.write(render_json(records, indent=args.indent) + "\n")

    return 0


if __name__ == "__main__":
    sys.exit(main())
