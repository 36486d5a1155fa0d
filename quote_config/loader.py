"""
Configuration Loader (``quote_config.loader``).

Responsibility
--------------
Loads a workflow YAML file and parses it into the typed
``quote_config.schema`` dataclasses.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Status names are checked against the catalog; an unknown name raises
  ``UnknownStatusError``.
* A role restriction must name a move that exists in the transition
  table, otherwise ``WorkflowConfigError``.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys inside a rule  -> ``WorkflowConfigError``.
"""

from __future__ import annotations

import hashlib
import json
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml

from quote_config.schema import RoleRestriction, WorkflowConfig
from quote_kernel.domain.status import QuoteStatus, coerce_status
from quote_kernel.domain.transitions import QUOTE_TRANSITIONS, find_transition
from quote_kernel.exceptions import WorkflowConfigError

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults" / "workflow.yaml"

_DURATION_KEYS = frozenset({"weeks", "days", "hours", "minutes", "seconds"})
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_duration(value: Any, source: str | None = None) -> timedelta:
    """
    Parse a duration: a mapping of timedelta fields or a number of seconds.

    Raises:
        WorkflowConfigError: unknown unit, negative or non-numeric value.
    """
    if isinstance(value, bool):
        raise WorkflowConfigError(f"invalid duration {value!r}", source)
    if isinstance(value, (int, float)):
        duration = timedelta(seconds=value)
    elif isinstance(value, dict):
        unknown = set(value) - _DURATION_KEYS
        if unknown:
            raise WorkflowConfigError(
                f"unknown duration unit(s) {sorted(unknown)}", source,
            )
        try:
            duration = timedelta(**{k: float(v) for k, v in value.items()})
        except (TypeError, ValueError):
            raise WorkflowConfigError(f"invalid duration {value!r}", source) from None
    else:
        raise WorkflowConfigError(f"invalid duration {value!r}", source)
    if duration < timedelta(0):
        raise WorkflowConfigError(f"negative duration {value!r}", source)
    return duration


def parse_role_restriction(data: dict[str, Any], source: str | None = None) -> RoleRestriction:
    """Parse one ``roles`` entry and check it names a real transition."""
    try:
        src = coerce_status(data["from"])
        dst = coerce_status(data["to"])
        roles = data["allowed_roles"]
    except KeyError as exc:
        raise WorkflowConfigError(f"role rule missing key {exc.args[0]!r}", source) from None
    if isinstance(roles, str) or not isinstance(roles, (list, tuple)):
        raise WorkflowConfigError(
            f"allowed_roles for {src.value}->{dst.value} must be a list", source,
        )
    if find_transition(src, dst, QUOTE_TRANSITIONS) is None:
        raise WorkflowConfigError(
            f"role rule names unknown transition {src.value}->{dst.value}", source,
        )
    return RoleRestriction(
        from_status=src,
        to_status=dst,
        allowed_roles=frozenset(str(r) for r in roles),
    )


def parse_staleness(data: dict[str, Any], source: str | None = None) -> dict[QuoteStatus, timedelta]:
    return {
        coerce_status(status): parse_duration(value, source)
        for status, value in (data or {}).items()
    }


def parse_workflow_config(data: dict[str, Any], source: str | None = None) -> WorkflowConfig:
    """
    Parse a full workflow config document.

    Missing sections fall back to the ``WorkflowConfig`` defaults.
    """
    restrictions = tuple(
        parse_role_restriction(item, source) for item in data.get("roles") or ()
    )
    seen: set[tuple[QuoteStatus, QuoteStatus]] = set()
    for r in restrictions:
        key = (r.from_status, r.to_status)
        if key in seen:
            raise WorkflowConfigError(
                f"duplicate role rule for {r.from_status.value}->{r.to_status.value}",
                source,
            )
        seen.add(key)

    log_level = str((data.get("logging") or {}).get("level", "INFO")).upper()
    if log_level not in _LOG_LEVELS:
        raise WorkflowConfigError(f"unknown log level {log_level!r}", source)

    return WorkflowConfig(
        version=int(data.get("version", 1)),
        role_restrictions=restrictions,
        staleness_thresholds=parse_staleness(data.get("staleness") or {}, source),
        log_level=log_level,
        source=source,
        checksum=compute_checksum(data),
    )


def load_workflow_config(path: Path | str | None = None) -> WorkflowConfig:
    """Load and parse a workflow config file (the bundled default when ``path`` is None)."""
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    return parse_workflow_config(load_yaml_file(config_path), source=str(config_path))
