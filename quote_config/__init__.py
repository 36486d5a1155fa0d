"""
quote_config -- single public entrypoint for workflow configuration.

Responsibility:
    ``get_active_config()`` loads and parses the workflow YAML (bundled
    default or an explicit path).  ``build_transition_table()`` turns the
    result into a kernel transition table.

Architecture position:
    Sits above ``quote_kernel`` and below ``quote_services``.  The kernel
    never imports from ``quote_config``.

Logging:
    ``get_active_config()`` applies the configured ``logging.level`` to the
    ``quote_kernel`` logger tree through ``configure_logging``.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``QUOTE_CONFIG_TRACE`` log entry with the version, checksum, source
    and rule counts, tying each status change back to the configuration
    that governed it.
"""

from __future__ import annotations

from pathlib import Path

from quote_config.bridges import build_transition_table
from quote_config.loader import compute_checksum, load_workflow_config
from quote_config.schema import RoleRestriction, WorkflowConfig
from quote_kernel.logging_config import configure_logging, get_logger

_logger = get_logger("config")


def get_active_config(config_path: Path | str | None = None) -> WorkflowConfig:
    """Load the active workflow configuration and apply its log level.

    Args:
        config_path: YAML file to load.  Defaults to the bundled
            ``quote_config/defaults/workflow.yaml``.

    Raises:
        FileNotFoundError: the file does not exist.
        WorkflowConfigError: a rule is malformed or names an unknown move.
        UnknownStatusError: a status name is not in the catalog.
    """
    config = load_workflow_config(config_path)
    _logger.info(
        "QUOTE_CONFIG_TRACE",
        extra={
            "config_version": config.version,
            "config_checksum": config.checksum,
            "config_source": config.source,
            "role_restriction_count": len(config.role_restrictions),
            "staleness_rule_count": len(config.staleness_thresholds),
        },
    )
    configure_logging(level=config.log_level)
    return config


__all__ = [
    "RoleRestriction",
    "WorkflowConfig",
    "build_transition_table",
    "compute_checksum",
    "get_active_config",
    "load_workflow_config",
]
