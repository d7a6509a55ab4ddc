from __future__ import annotations

import os
from typing import Any

from pipelinekit.config_namespace import ConfigNamespace
from pipelinekit.stage_types import StageIO, StageRef
from platform_setup.foundation import fs
from platform_setup.framework.context import APP_CONFIG_FILE_NAME, OrchestrationContext
from platform_setup.framework.errors import MissingPrerequisiteError
from platform_setup.framework.pipeline import PipelineInputs
from platform_setup.framework.runtime import RunContext
from platform_setup.framework.stage_blocks import make_action_stage_block

KIND_ID = "staging.runtime_assets"


def stage_runtime_assets(context: OrchestrationContext) -> dict[str, Any]:
    """Refresh `<platform_assets>/runtime` and the app-config snapshot; runs unconditionally."""

    source_dir = os.path.join(context.app_config_dir, "assets", "runtime")
    dest_dir = os.path.join(context.platform_assets_dir, "runtime")
    if not os.path.isdir(source_dir):
        raise MissingPrerequisiteError(f"Runtime assets folder not found: {source_dir}")
    if not os.path.isfile(context.app_config_path):
        raise MissingPrerequisiteError(f"App config file not found: {context.app_config_path}")

    copied = fs.copy_folder_contents(source_dir, dest_dir)
    snapshot = fs.copy_file(
        context.app_config_path,
        os.path.join(context.platform_assets_dir, APP_CONFIG_FILE_NAME),
    )
    return {"runtime_files": copied, "app_config_snapshot": snapshot}


def _build(inputs: PipelineInputs, *, instance_id: str, cfg: ConfigNamespace):
    cfg.assert_consumed()

    def _action(run: RunContext) -> dict[str, Any]:
        staged = stage_runtime_assets(run.context)
        run.logger.info(
            "Staged %d runtime asset(s) and %s",
            len(staged["runtime_files"]),
            APP_CONFIG_FILE_NAME,
        )
        return staged

    return make_action_stage_block(instance_id, fn=_action)


STAGE = StageRef(
    id=KIND_ID,
    builder=_build,
    doc="Copy app-config runtime assets and a config snapshot into the shared platform assets folder.",
    source="platform_setup.stages.staging.runtime_assets.stage_runtime_assets",
    tags=("staging",),
    kind="action",
    io=StageIO(provides=("platform_assets",)),
)
