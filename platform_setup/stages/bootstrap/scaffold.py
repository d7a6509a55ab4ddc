from __future__ import annotations

import os
from typing import Any, Callable, Literal

from pipelinekit.config_namespace import ConfigNamespace
from pipelinekit.stage_types import StageIO, StageRef
from platform_setup.framework.context import (
    SUB_COMMAND_CONFIGURE,
    OrchestrationContext,
    parse_enabled_platforms,
)
from platform_setup.framework.errors import ScaffoldBootstrapError
from platform_setup.framework.pipeline import PipelineInputs, PipelineResult
from platform_setup.framework.runtime import RunContext
from platform_setup.framework.stage_blocks import make_action_stage_block

KIND_ID = "bootstrap.scaffold"

DEFAULT_BOOTSTRAP_APP_CONFIG = "helloWorld"

ScaffoldOutcome = Literal["already_present", "bootstrapped", "deferred"]


def derive_bootstrap_context(
    context: OrchestrationContext,
    *,
    bootstrap_app_config: str,
    bootstrap_platforms: list[str] | None,
) -> OrchestrationContext:
    """Same paths, synthetic app config, forced `configure`, one level deeper."""

    enabled = dict(context.enabled_platforms)
    if bootstrap_platforms is not None:
        enabled = parse_enabled_platforms(
            {platform: True for platform in bootstrap_platforms},
            f"stages.{KIND_ID}.bootstrap_platforms",
        )
    return context.derive(
        app_config_id=bootstrap_app_config,
        enabled_platforms=enabled,
        sub_command=SUB_COMMAND_CONFIGURE,
        bootstrap_depth=context.bootstrap_depth + 1,
    )


def ensure_scaffold(
    run: RunContext,
    run_nested: Callable[[OrchestrationContext], PipelineResult],
    *,
    bootstrap_app_config: str = DEFAULT_BOOTSTRAP_APP_CONFIG,
    bootstrap_platforms: list[str] | None = None,
) -> ScaffoldOutcome:
    context = run.context
    if os.path.isdir(context.platform_builds_dir):
        return "already_present"

    if context.bootstrap_depth > 0:
        # The nested run's own configurators create the folder; the parent verifies it.
        run.logger.info(
            "Platform builds folder missing inside bootstrap run; deferring to configurators"
        )
        return "deferred"

    run.logger.warning("Platforms not created yet. Creating them for you...")
    derived = derive_bootstrap_context(
        context,
        bootstrap_app_config=bootstrap_app_config,
        bootstrap_platforms=bootstrap_platforms,
    )
    nested = run_nested(derived)
    run.nested_runs.append({"run_id": nested.run_id, "state": nested.state})

    if not os.path.isdir(context.platform_builds_dir):
        raise ScaffoldBootstrapError(
            f"Bootstrap run {nested.run_id} completed but did not create {context.platform_builds_dir}"
        )
    return "bootstrapped"


def _build(inputs: PipelineInputs, *, instance_id: str, cfg: ConfigNamespace):
    bootstrap_app_config = cfg.get_str("bootstrap_app_config", default=DEFAULT_BOOTSTRAP_APP_CONFIG)
    if bootstrap_app_config is None:
        raise ValueError(f"stages.{KIND_ID}.bootstrap_app_config cannot be null")
    bootstrap_platforms = cfg.get_optional_list_str("bootstrap_platforms", default=None)
    cfg.assert_consumed()

    def _action(run: RunContext) -> dict[str, Any]:
        outcome = ensure_scaffold(
            run,
            inputs.run_nested,
            bootstrap_app_config=bootstrap_app_config,
            bootstrap_platforms=bootstrap_platforms,
        )
        return {"outcome": outcome, "platform_builds_dir": run.context.platform_builds_dir}

    return make_action_stage_block(instance_id, fn=_action)


STAGE = StageRef(
    id=KIND_ID,
    builder=_build,
    doc="Ensure the platform builds folder exists, bootstrapping it with one nested run.",
    source="platform_setup.stages.bootstrap.scaffold.ensure_scaffold",
    tags=("bootstrap",),
    kind="action",
    io=StageIO(provides=("platform_builds_dir",)),
)
