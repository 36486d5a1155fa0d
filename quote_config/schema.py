"""
Workflow configuration schema.

The frozen, typed form of a workflow YAML file.  The loader parses YAML
into these types; bridges translate them into kernel inputs (a transition
table, staleness thresholds).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from quote_kernel.domain.status import QuoteStatus


@dataclass(frozen=True)
class RoleRestriction:
    """Restricts one ``(from, to)`` move to the listed actor roles."""

    from_status: QuoteStatus
    to_status: QuoteStatus
    allowed_roles: frozenset[str]


@dataclass(frozen=True)
class WorkflowConfig:
    """A parsed workflow configuration.

    ``staleness_thresholds`` maps a status to how long a quote may sit in
    it before it is reported stale.  ``checksum`` identifies the source
    document (SHA-256 of its canonical JSON form).
    """

    version: int = 1
    role_restrictions: tuple[RoleRestriction, ...] = ()
    staleness_thresholds: dict[QuoteStatus, timedelta] = field(default_factory=dict)
    log_level: str = "INFO"
    source: str | None = None
    checksum: str | None = None
