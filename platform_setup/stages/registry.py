from __future__ import annotations

from functools import lru_cache

from pipelinekit.stage_registry import StageRegistry
from pipelinekit.stage_types import StageRef


@lru_cache(maxsize=1)
def get_stage_registry() -> StageRegistry:
    # Stage modules define `STAGE` symbols; each package exports them via `__all_stages__`.
    from platform_setup.stages import bootstrap, platforms, staging  # noqa: PLC0415

    refs: list[StageRef] = []
    for pkg in (bootstrap, staging, platforms):
        exported = getattr(pkg, "__all_stages__", None)
        if isinstance(exported, (list, tuple)):
            refs.extend(exported)

    return StageRegistry.from_refs(refs)
