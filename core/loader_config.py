"""Loader configuration contract.

Describes which Go files of an input directory are extracted and how
failures are handled. Configs come from YAML/JSON files and from
``GOEXTRACT_*`` environment variables (a ``.env`` file is honoured).
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "GOEXTRACT_"

DEFAULT_INPUT_DIR = "./"
DEFAULT_NAME_TAG_KEY = "json"


class ConfigValidationError(RuntimeError):
    """Raised when a loader configuration is invalid."""


@dataclass(frozen=True)
class LoaderConfig:
    """Input selection and failure policy for one extraction run.

    Attributes:
        input_dir: Directory whose ``.go`` files are extracted (not recursive).
        include_regexp: When set, only file names matching it are extracted,
            test files included.
        exclude_regexp: File names matching it are skipped.
        continue_on_error: Keep going after a file fails instead of raising.
        strict_syntax: Refuse files whose syntax tree contains error nodes.
        resolve_aliases: Share alias declarations across all selected files.
        name_tag_key: Tag key carrying the serialized field name.
    """

    input_dir: str = ""
    include_regexp: str = ""
    exclude_regexp: str = ""
    continue_on_error: bool = True
    strict_syntax: bool = True
    resolve_aliases: bool = False
    name_tag_key: str = DEFAULT_NAME_TAG_KEY

    def validate(self) -> None:
        """Check option consistency.

        Raises:
            ConfigValidationError: If both regexps are set, a regexp does not
                compile, or the name tag key is empty.
        """
        if self.include_regexp and self.exclude_regexp:
            raise ConfigValidationError("both include and exclude regexps are set")

        for label, pattern in (
            ("include", self.include_regexp),
            ("exclude", self.exclude_regexp),
        ):
            if not pattern:
                continue
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ConfigValidationError(
                    f"failed to compile {label} regexp {pattern!r}: {exc}"
                ) from exc

        if not self.name_tag_key.strip():
            raise ConfigValidationError("name_tag_key must not be empty")

    def prepare(self) -> "LoaderConfig":
        """Validate and return a copy with defaults filled in."""
        self.validate()
        if not self.input_dir:
            return replace(self, input_dir=DEFAULT_INPUT_DIR)
        return self


def _expect_dict(payload: Any, ctx: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ConfigValidationError(f"{ctx} must be an object")
    return payload


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    raise ConfigValidationError(f"{key} must be a boolean, got {value!r}")


def config_from_mapping(payload: dict[str, Any]) -> LoaderConfig:
    """Build a LoaderConfig from a plain mapping (parsed YAML/JSON)."""
    payload = _expect_dict(payload, "loader config")
    known = {
        "input_dir",
        "include_regexp",
        "exclude_regexp",
        "continue_on_error",
        "strict_syntax",
        "resolve_aliases",
        "name_tag_key",
    }
    unknown = sorted(set(payload) - known)
    if unknown:
        raise ConfigValidationError(f"unknown loader config keys: {', '.join(unknown)}")

    defaults = LoaderConfig()
    return LoaderConfig(
        input_dir=str(payload.get("input_dir") or "").strip(),
        include_regexp=str(payload.get("include_regexp") or ""),
        exclude_regexp=str(payload.get("exclude_regexp") or ""),
        continue_on_error=_parse_bool(
            payload.get("continue_on_error", defaults.continue_on_error),
            "continue_on_error",
        ),
        strict_syntax=_parse_bool(
            payload.get("strict_syntax", defaults.strict_syntax), "strict_syntax"
        ),
        resolve_aliases=_parse_bool(
            payload.get("resolve_aliases", defaults.resolve_aliases), "resolve_aliases"
        ),
        name_tag_key=str(payload.get("name_tag_key") or defaults.name_tag_key).strip(),
    )


def load_loader_config(path: str) -> LoaderConfig:
    """Load a loader config from a YAML or JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the payload is malformed.
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Loader config file not found: {config_path}")

    text = config_path.read_text(encoding="utf-8")
    try:
        if config_path.suffix.lower() == ".json":
            payload = json.loads(text)
        else:
            payload = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigValidationError(f"Failed to parse loader config {config_path}: {exc}") from exc

    if payload is None:
        logger.warning("Loader config %s is empty; using defaults", config_path)
        payload = {}

    config = config_from_mapping(payload)
    logger.debug("Loaded loader config from %s: %s", config_path, config)
    return config


def config_from_env(base: LoaderConfig | None = None) -> LoaderConfig:
    """Apply ``GOEXTRACT_*`` environment overrides on top of ``base``.

    A ``.env`` file in the working directory is loaded first; variables
    already present in the environment win over it.
    """
    load_dotenv()
    config = base or LoaderConfig()
    overrides: dict[str, Any] = {}

    string_keys = {
        "INPUT_DIR": "input_dir",
        "INCLUDE": "include_regexp",
        "EXCLUDE": "exclude_regexp",
        "NAME_TAG_KEY": "name_tag_key",
    }
    bool_keys = {
        "CONTINUE_ON_ERROR": "continue_on_error",
        "STRICT_SYNTAX": "strict_syntax",
        "RESOLVE_ALIASES": "resolve_aliases",
    }

    for env_suffix, attr in string_keys.items():
        raw = os.getenv(ENV_PREFIX + env_suffix)
        if raw is not None:
            overrides[attr] = raw.strip()
    for env_suffix, attr in bool_keys.items():
        raw = os.getenv(ENV_PREFIX + env_suffix)
        if raw is not None:
            overrides[attr] = _parse_bool(raw, ENV_PREFIX + env_suffix)

    if overrides:
        logger.debug("Applying environment overrides: %s", sorted(overrides))
        config = replace(config, **overrides)
    return config
