#!/usr/bin/env python3
"""
Command-line entry point for Go struct and constant extraction.

Extracts every selected file of an input directory and writes the results
as JSON keyed by file name, for consumption by code generators.

Usage:
    python run_extract.py --input-dir ./models
    python run_extract.py --input-dir ./models --exclude '_gen\\.go$' --output-file out/decls.json
    python run_extract.py --config extract.yaml --fail-fast
"""

import argparse
import json
import logging
import os
import sys
from dataclasses import replace
from typing import List, Optional

from core.loader_config import (
    ConfigValidationError,
    LoaderConfig,
    config_from_env,
    load_loader_config,
)
from core.structured_logging import configure_structured_logging, set_run_id
from extraction.extractor import load_with_stats

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Go struct & constant declaration extractor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_extract.py --input-dir ./models\n"
            "  python run_extract.py --config extract.yaml --output-file out/decls.json\n"
        ),
    )

    parser.add_argument(
        "--config",
        default=None,
        help="YAML or JSON loader config. Command-line flags override it.",
    )
    parser.add_argument(
        "--input-dir",
        default=None,
        help="Directory with the Go files to extract. Default: ./",
    )
    filters = parser.add_mutually_exclusive_group()
    filters.add_argument(
        "--include",
        default=None,
        help="Only extract file names matching this regexp (test files included).",
    )
    filters.add_argument(
        "--exclude",
        default=None,
        help="Skip file names matching this regexp.",
    )
    parser.add_argument(
        "--output-file",
        default=None,
        help="Write JSON output here instead of stdout.",
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        default=False,
        help="Stop at the first file that cannot be extracted.",
    )
    parser.add_argument(
        "--resolve-aliases",
        action="store_true",
        default=False,
        help="Share alias declarations (type MyEnum string) across all files.",
    )
    parser.add_argument(
        "--lenient-syntax",
        action="store_true",
        default=False,
        help="Extract files with syntax errors instead of failing them.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging.",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> LoaderConfig:
    """Combine config file, environment and command-line flags.

    Precedence, lowest first: defaults, config file, GOEXTRACT_* environment,
    command-line flags.
    """
    config = load_loader_config(args.config) if args.config else LoaderConfig()
    config = config_from_env(config)

    overrides = {}
    if args.input_dir is not None:
        overrides["input_dir"] = args.input_dir
    if args.include is not None:
        overrides["include_regexp"] = args.include
        overrides["exclude_regexp"] = ""
    if args.exclude is not None:
        overrides["exclude_regexp"] = args.exclude
        overrides["include_regexp"] = ""
    if args.fail_fast:
        overrides["continue_on_error"] = False
    if args.resolve_aliases:
        overrides["resolve_aliases"] = True
    if args.lenient_syntax:
        overrides["strict_syntax"] = False

    return replace(config, **overrides)


def write_output(payload: dict, output_file: Optional[str]) -> None:
    """Write the JSON payload to a file or stdout."""
    text = json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True)
    if output_file is None:
        sys.stdout.write(text + "\n")
        return

    parent = os.path.dirname(os.path.abspath(output_file))
    os.makedirs(parent, exist_ok=True)
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(text + "\n")
    logger.info("Wrote %d file entries to %s", len(payload), output_file)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = parse_args(argv)
    configure_structured_logging(logging.DEBUG if args.verbose else logging.INFO)
    run_id = set_run_id()
    logger.info("Starting extraction run %s", run_id)

    try:
        config = build_config(args)
        parsed_files, stats = load_with_stats(config)
    except (ConfigValidationError, FileNotFoundError) as e:
        logger.error("Configuration error: %s", e)
        return 1
    except Exception as e:
        logger.error("Extraction failed: %s", e, exc_info=True)
        return 1

    payload = {name: parsed.to_dict() for name, parsed in parsed_files.items()}
    write_output(payload, args.output_file)

    if stats.files_failed:
        logger.warning("%d files failed: %s", stats.files_failed, sorted(stats.failures))
    logger.info("Final stats: %s", stats)
    return 0


if __name__ == "__main__":
    sys.exit(main())
