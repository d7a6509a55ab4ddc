from __future__ import annotations

from typing import Any, Callable

from pipelinekit.engine.pipeline import ActionStep, Block
from platform_setup.framework.runtime import RunContext


def _normalized_optional_str(value: Any, *, path: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"{path} must be a string or None (type={type(value).__name__})")
    trimmed = value.strip()
    return trimmed or None


def make_action_stage_block(
    instance_id: str,
    *,
    fn: Callable[[RunContext], Any],
    doc: str | None = None,
    source: str | None = None,
    tags: tuple[str, ...] = (),
) -> Block:
    """Wrap a single action as a stage block; its return value is captured under `instance_id`."""

    if not isinstance(instance_id, str) or not instance_id.strip():
        raise TypeError("instance_id must be a non-empty string")
    instance_id = instance_id.strip()

    if not callable(fn):
        raise TypeError("fn must be callable")

    stage_meta: dict[str, Any] = {"stage_id": instance_id}
    normalized_doc = _normalized_optional_str(doc, path=f"stage[{instance_id}].doc")
    if normalized_doc:
        stage_meta["doc"] = normalized_doc
    normalized_source = _normalized_optional_str(source, path=f"stage[{instance_id}].source")
    if normalized_source:
        stage_meta["source"] = normalized_source
    if tags:
        stage_meta["tags"] = list(tags)

    return Block(
        name=instance_id,
        nodes=[ActionStep(name="action", fn=fn, capture_key=instance_id)],
        meta=stage_meta,
    )
