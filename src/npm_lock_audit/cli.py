"""Command line entrypoint for npm-lock-audit.

Usage:
  npm-lock-audit scan [LOCKFILE|-] [--dataset path_or_url] [--format json|markdown]
  npm-lock-audit update-dataset [--url URL] [--output PATH]
  npm-lock-audit validate-dataset [--input PATH]

``scan`` exits 10 when compromised packages are found (0 with --warn-only),
and 1 on invalid input, dataset or configuration errors.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import ConfigError, Settings, load_settings
from .core import DatasetError, load_dataset, scan_lockfile, scan_text
from .ingestion import (
    DEFAULT_ATTACK_NAME,
    DataDogFeedError,
    aggregate_datadog_payload,
    build_dataset,
    fetch_datadog_feed,
    write_dataset,
)
from .parsers.package_lock import InvalidLockfileError
from .summary import render_summary
from .validators.dataset import DatasetValidationError, validate_file

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_FINDINGS = 10

logger = logging.getLogger("npm_lock_audit")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="npm-lock-audit", description=__doc__.splitlines()[0])
    parser.add_argument("--config", type=Path, default=None, help="Path to a JSON settings file")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default=None,
        help="Override the configured log level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Scan a package-lock.json for compromised packages")
    scan.add_argument(
        "lockfile",
        nargs="?",
        default="-",
        help="Path to package-lock.json, or '-' to read pasted content from stdin",
    )
    scan.add_argument("--dataset", default=None, help="Dataset path or URL")
    scan.add_argument("--format", choices=("json", "markdown"), default="json")
    scan.add_argument("--output", type=Path, default=None, help="Write the report to a file")
    scan.add_argument("--warn-only", action="store_true", help="Exit 0 even when findings exist")

    update = subparsers.add_parser(
        "update-dataset", help="Rebuild the dataset from the DataDog IOC feed"
    )
    update.add_argument("--url", default=None, help="CSV feed URL")
    update.add_argument("--output", type=Path, default=None, help="Dataset path to write")
    update.add_argument("--attack-name", default=DEFAULT_ATTACK_NAME)

    validate = subparsers.add_parser(
        "validate-dataset", help="Validate a dataset file against the bundled schema"
    )
    validate.add_argument("--input", type=Path, default=None, help="Dataset path to validate")

    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=logging.getLevelName(level),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def _run_scan(args: argparse.Namespace, settings: Settings) -> int:
    dataset = load_dataset(args.dataset or settings.dataset_source)

    if args.lockfile == "-":
        content = sys.stdin.read()
        if not content.strip():
            print("ERROR: No lockfile content provided on stdin", file=sys.stderr)
            return EXIT_ERROR
        result = scan_text(content, dataset)
    else:
        result = scan_lockfile(Path(args.lockfile), dataset)

    if args.format == "markdown":
        output = render_summary(result, dataset)
    else:
        output = json.dumps(result.to_dict(), indent=2) + "\n"

    if args.output is not None:
        args.output.write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)

    if result.has_findings and not (args.warn_only or settings.warn_only):
        return EXIT_FINDINGS
    return EXIT_OK


def _run_update(args: argparse.Namespace, settings: Settings) -> int:
    url = args.url or settings.feed_url
    output = args.output or Path(settings.dataset_source)

    aggregation = aggregate_datadog_payload(fetch_datadog_feed(url))
    dataset = build_dataset(aggregation, attack_name=args.attack_name)
    write_dataset(dataset, output)

    logger.info(
        "Wrote %d compromised packages (%d versions) to %s",
        dataset.package_count,
        dataset.version_count,
        output,
    )
    return EXIT_OK


def _run_validate(args: argparse.Namespace, settings: Settings) -> int:
    input_path = args.input or Path(settings.dataset_source)
    try:
        validate_file(input_path)
    except FileNotFoundError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_ERROR
    except json.JSONDecodeError as exc:
        print(f"ERROR: Failed to read JSON: {exc}", file=sys.stderr)
        return EXIT_ERROR
    except DatasetValidationError as exc:
        print(f"ERROR: Dataset failed validation:{exc}", file=sys.stderr)
        return EXIT_ERROR

    print(f"Dataset {input_path} is valid")
    return EXIT_OK


_COMMANDS = {
    "scan": _run_scan,
    "update-dataset": _run_update,
    "validate-dataset": _run_validate,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_ERROR

    _configure_logging(args.log_level or settings.log_level)

    try:
        return _COMMANDS[args.command](args, settings)
    except InvalidLockfileError as exc:
        print(
            f"ERROR: Make sure the input is a valid package-lock.json file. {exc}",
            file=sys.stderr,
        )
    except OSError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
    except (DatasetError, DataDogFeedError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
    return EXIT_ERROR


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
