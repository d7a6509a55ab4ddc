"""Contracts for the external collaborators the pipeline delegates to.

Collaborators signal failure by raising; the pipeline propagates their
exceptions unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from platform_setup.framework.context import OrchestrationContext
from platform_setup.framework.errors import MissingPrerequisiteError


class CredentialGenerator(Protocol):
    def generate(self, context: OrchestrationContext, target_path: str) -> None:
        ...


class PlatformProjectWriter(Protocol):
    def write_project(
        self, context: OrchestrationContext, platform: str, **params: Any
    ) -> dict[str, Any]:
        ...


@dataclass(frozen=True)
class Collaborators:
    """Collaborators keyed by credential id and by platform family."""

    credential_generators: Mapping[str, CredentialGenerator] = field(default_factory=dict)
    project_writers: Mapping[str, PlatformProjectWriter] = field(default_factory=dict)

    def writer_for(self, family: str) -> PlatformProjectWriter:
        writer = self.project_writers.get(family)
        if writer is None:
            available = ", ".join(sorted(self.project_writers)) or "<none>"
            raise MissingPrerequisiteError(f"No project writer registered for family {family!r} (available: {available})")
        return writer
