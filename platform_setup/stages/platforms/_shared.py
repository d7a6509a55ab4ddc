"""Helpers shared by the per-family platform configurator stages.

Each configurator stage kind is planned once per platform, with the platform id as
its instance id. The action delegates project generation to the family's
`PlatformProjectWriter`; an inactive platform is a successful no-op.
"""

from __future__ import annotations

from typing import Any, Callable

from pipelinekit.engine.pipeline import Block
from platform_setup.framework.activation import is_platform_active, skipped_result
from platform_setup.framework.collaborators import PlatformProjectWriter
from platform_setup.framework.pipeline import PipelineInputs
from platform_setup.framework.platforms import family_of, parse_platform
from platform_setup.framework.runtime import RunContext
from platform_setup.framework.stage_blocks import make_action_stage_block


def _skip_if_inactive(run: RunContext, platform: str) -> dict[str, Any] | None:
    if is_platform_active(run.context, platform):
        return None
    run.logger.debug("Platform %s is not active; skipping", platform)
    return skipped_result(platform)


def _write_platform(
    run: RunContext, platform: str, writer: PlatformProjectWriter, params: dict[str, Any]
) -> dict[str, Any]:
    run.logger.info("Configuring %s project", platform)
    written = writer.write_project(run.context, platform, **params)
    return {"platform": platform, "skipped": False, "project": written}


def configure_platform(
    run: RunContext,
    platform: str,
    writer: PlatformProjectWriter,
    **params: Any,
) -> dict[str, Any]:
    skipped = _skip_if_inactive(run, platform)
    if skipped is not None:
        return skipped
    return _write_platform(run, platform, writer, params)


def platform_for_instance(instance_id: str, family: str, *, kind_id: str) -> str:
    """Resolve a configurator instance id to a platform of `family`."""

    platform = parse_platform(instance_id, f"{kind_id} instance id")
    if family_of(platform) != family:
        raise ValueError(
            f"{kind_id} configures the {family} family; {platform!r} belongs to {family_of(platform)!r}"
        )
    return platform


def make_platform_stage_block(
    inputs: PipelineInputs,
    *,
    instance_id: str,
    family: str,
    kind_id: str,
    params: Callable[[str], dict[str, Any]] | None = None,
) -> Block:
    platform = platform_for_instance(instance_id, family, kind_id=kind_id)
    writer_params = params(platform) if params is not None else {}

    def _action(run: RunContext) -> dict[str, Any]:
        # Same gate as configure_platform, checked before the writer lookup so an
        # inactive platform never needs a registered writer.
        skipped = _skip_if_inactive(run, platform)
        if skipped is not None:
            return skipped
        return _write_platform(run, platform, inputs.collaborators.writer_for(family), writer_params)

    return make_action_stage_block(instance_id, fn=_action)
