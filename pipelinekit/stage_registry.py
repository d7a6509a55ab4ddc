from __future__ import annotations

import difflib
from dataclasses import dataclass
from typing import Any, Iterable

from pipelinekit.stage_types import StageRef


@dataclass(frozen=True)
class StageRegistry:
    """Immutable lookup of stage kinds by id."""

    _by_id: dict[str, StageRef]

    @classmethod
    def from_refs(cls, refs: Iterable[StageRef]) -> "StageRegistry":
        entries: dict[str, StageRef] = {}
        for ref in refs:
            if ref.id in entries:
                raise ValueError(f"Duplicate stage kind id: {ref.id}")
            entries[ref.id] = ref
        return cls(_by_id=entries)

    def __contains__(self, stage_id: object) -> bool:
        return isinstance(stage_id, str) and stage_id.strip() in self._by_id

    def available(self, *, tag: str | None = None) -> tuple[str, ...]:
        return tuple(
            sorted(ref.id for ref in self._by_id.values() if tag is None or tag in ref.tags)
        )

    def describe(self, *, tag: str | None = None) -> tuple[dict[str, Any], ...]:
        rows: list[dict[str, Any]] = []
        for stage_id in self.available(tag=tag):
            ref = self._by_id[stage_id]
            rows.append(
                {
                    "stage_id": ref.id,
                    "doc": ref.doc,
                    "source": ref.source,
                    "tags": list(ref.tags),
                    "kind": ref.kind,
                    "io": {"requires": list(ref.io.requires), "provides": list(ref.io.provides)},
                }
            )
        return tuple(rows)

    def resolve(self, stage_id: str) -> StageRef:
        if not isinstance(stage_id, str) or not stage_id.strip():
            raise ValueError("stage_id must be a non-empty string")
        ref = self._by_id.get(stage_id.strip())
        if ref is not None:
            return ref

        suggestions = difflib.get_close_matches(stage_id.strip(), list(self._by_id), n=3)
        if suggestions:
            raise ValueError(
                f"Unknown stage kind id: {stage_id} (did you mean: {', '.join(suggestions)}?)"
            )
        available = ", ".join(self.available()) or "<none>"
        raise ValueError(f"Unknown stage kind id: {stage_id} (available: {available})")
