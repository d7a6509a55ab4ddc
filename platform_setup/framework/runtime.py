from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from platform_setup.framework.context import OrchestrationContext


@dataclass
class RunContext:
    """Mutable bookkeeping for one pipeline run; the orchestration context itself stays frozen."""

    run_id: str
    context: OrchestrationContext
    logger: logging.Logger
    created_at: str

    outputs: dict[str, Any] = field(default_factory=dict)
    steps: list[dict[str, Any]] = field(default_factory=list)
    nested_runs: list[dict[str, Any]] = field(default_factory=list)
