"""
High-level orchestrator for Go declaration extraction.

This module provides the main entry points for extracting declarations from
single files or from every selected file of an input directory. Each file
either yields a complete ParsedFile or fails on its own; a failure never
leaks a partial result.
"""

import logging
import os
import re
from typing import Dict, List, Mapping, Optional, Pattern, Tuple

from core.loader_config import LoaderConfig
from core.structured_logging import source_file_scope
from extraction.config import DEFAULT_NAME_TAG_KEY, GO_EXTENSION, GO_TEST_SUFFIX
from extraction.errors import SourceSyntaxError
from extraction.models import AliasInfo, ParsedFile
from extraction.parser import count_error_nodes, parse_file
from extraction.traversal import collect_aliases, extract_parsed_file

logger = logging.getLogger(__name__)


class ExtractionStats:
    """Statistics for an extraction operation."""

    def __init__(self):
        self.files_processed = 0
        self.files_failed = 0
        self.structs_extracted = 0
        self.constants_extracted = 0
        self.parse_errors = 0
        self.failures: Dict[str, str] = {}

    def to_dict(self) -> Dict[str, object]:
        """Convert stats to dictionary."""
        return {
            "files_processed": self.files_processed,
            "files_failed": self.files_failed,
            "structs_extracted": self.structs_extracted,
            "constants_extracted": self.constants_extracted,
            "parse_errors": self.parse_errors,
            "failures": dict(self.failures),
        }

    def __str__(self) -> str:
        """String representation of stats."""
        return (
            f"ExtractionStats(processed={self.files_processed}, "
            f"failed={self.files_failed}, structs={self.structs_extracted}, "
            f"constants={self.constants_extracted}, parse_errors={self.parse_errors})"
        )


def is_valid_file(
    name: str,
    include: Optional[Pattern[str]] = None,
    exclude: Optional[Pattern[str]] = None,
) -> bool:
    """Decide whether a file name is selected for extraction.

    An include pattern, when given, is the only criterion. Otherwise the
    file must be a non-test ``.go`` file not matching the exclude pattern.
    """
    if include is not None:
        return include.search(name) is not None

    if name.endswith(GO_TEST_SUFFIX) or not name.endswith(GO_EXTENSION):
        return False

    if exclude is not None and exclude.search(name):
        return False

    return True


def discover_go_files(config: LoaderConfig) -> List[str]:
    """List the selected file names of the config's input directory.

    Args:
        config: A prepared loader config.

    Returns:
        Sorted file names relative to ``config.input_dir``. Sub-directories
        are not descended into.

    Raises:
        FileNotFoundError: If the input directory does not exist.
    """
    directory = config.input_dir
    if not os.path.isdir(directory):
        raise FileNotFoundError(f"Input directory not found: {directory}")

    include = re.compile(config.include_regexp) if config.include_regexp else None
    exclude = re.compile(config.exclude_regexp) if config.exclude_regexp else None

    file_names = [
        entry.name
        for entry in os.scandir(directory)
        if entry.is_file() and is_valid_file(entry.name, include, exclude)
    ]
    logger.info("Found %d Go files in %s", len(file_names), directory)
    return sorted(file_names)


def parse_go_file(
    file_path: str,
    known_aliases: Optional[Mapping[str, AliasInfo]] = None,
    strict_syntax: bool = True,
    name_tag_key: str = DEFAULT_NAME_TAG_KEY,
) -> ParsedFile:
    """Parse one Go file and extract its declarations.

    Raises:
        FileNotFoundError: If the file does not exist.
        SourceSyntaxError: If the file has syntax errors and strict_syntax is set.
        ExtractionError: If a declaration cannot be processed.
    """
    tree, _ = parse_file(file_path)

    if tree.root_node.has_error:
        error_count = count_error_nodes(tree)
        if strict_syntax:
            raise SourceSyntaxError(
                f"cannot parse file {file_path}: {error_count} syntax error nodes"
            )
        logger.warning(
            "File %s contains syntax errors (%d error nodes)", file_path, error_count
        )

    return extract_parsed_file(tree, known_aliases=known_aliases, name_tag_key=name_tag_key)


def _collect_directory_aliases(
    directory: str,
    file_names: List[str],
) -> Dict[str, AliasInfo]:
    """Collect alias declarations of every selected file.

    Files that cannot be read are left to the main pass to report.
    """
    aliases: Dict[str, AliasInfo] = {}
    for name in file_names:
        try:
            tree, _ = parse_file(os.path.join(directory, name))
        except OSError as e:
            logger.debug("Alias pre-pass skipped %s: %s", name, e)
            continue
        aliases.update(collect_aliases(tree))
    logger.debug("Collected %d aliases across %d files", len(aliases), len(file_names))
    return aliases


def load_with_stats(config: LoaderConfig) -> Tuple[Dict[str, ParsedFile], ExtractionStats]:
    """Extract every selected file of the config's input directory.

    Args:
        config: Loader configuration; validated and defaulted here.

    Returns:
        A tuple of (parsed_files, stats) where parsed_files maps each
        successfully extracted file name to its ParsedFile.

    Raises:
        ConfigValidationError: If the config is invalid.
        FileNotFoundError: If the input directory does not exist.
        Exception: The first per-file failure when continue_on_error is off.
    """
    config = config.prepare()
    file_names = discover_go_files(config)

    stats = ExtractionStats()
    result: Dict[str, ParsedFile] = {}

    if not file_names:
        logger.warning("No Go files selected in %s", config.input_dir)
        return result, stats

    known_aliases: Dict[str, AliasInfo] = {}
    if config.resolve_aliases:
        known_aliases = _collect_directory_aliases(config.input_dir, file_names)

    for name in file_names:
        file_path = os.path.join(config.input_dir, name)
        with source_file_scope(name):
            try:
                parsed = parse_go_file(
                    file_path,
                    known_aliases=known_aliases,
                    strict_syntax=config.strict_syntax,
                    name_tag_key=config.name_tag_key,
                )
            except SourceSyntaxError as e:
                logger.error("Syntax errors in %s: %s", file_path, e)
                stats.parse_errors += 1
                stats.files_failed += 1
                stats.failures[name] = str(e)
                if not config.continue_on_error:
                    raise
                continue
            except Exception as e:
                logger.error("Failed to parse file %s: %s", file_path, e)
                stats.files_failed += 1
                stats.failures[name] = str(e)
                if not config.continue_on_error:
                    raise
                continue

            result[name] = parsed
            stats.files_processed += 1
            stats.structs_extracted += len(parsed.structs)
            stats.constants_extracted += len(parsed.constants)
            logger.info(
                "Extracted %d structs and %d constants from %s",
                len(parsed.structs),
                len(parsed.constants),
                name,
            )

    logger.info("Extraction complete: %s", stats)
    return result, stats


def load(config: LoaderConfig) -> Dict[str, ParsedFile]:
    """Extract every selected file and return the results keyed by file name.

    Example:
        >>> files = load(LoaderConfig(input_dir="models/"))
        >>> files["event.go"].structs[0].name
        'Event'
    """
    result, _ = load_with_stats(config)
    return result
