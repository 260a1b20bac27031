"""Core shared configuration and logging utilities."""

from core.structured_logging import (
    configure_structured_logging,
    get_run_id,
    get_source_file,
    set_run_id,
    source_file_scope,
)
from core.loader_config import (
    ConfigValidationError,
    LoaderConfig,
    config_from_env,
    config_from_mapping,
    load_loader_config,
)

__all__ = [
    "configure_structured_logging",
    "get_run_id",
    "get_source_file",
    "set_run_id",
    "source_file_scope",
    "ConfigValidationError",
    "LoaderConfig",
    "config_from_env",
    "config_from_mapping",
    "load_loader_config",
]
