from __future__ import annotations

from pipelinekit.config_namespace import ConfigNamespace
from pipelinekit.stage_types import StageIO, StageRef
from platform_setup.framework.pipeline import PipelineInputs
from platform_setup.stages.platforms._shared import make_platform_stage_block

KIND_ID = "platforms.gradle"
FAMILY = "android"


def _build(inputs: PipelineInputs, *, instance_id: str, cfg: ConfigNamespace):
    # Extra entries written to the generated project's local.properties.
    properties = cfg.get_mapping_str("properties", default={})
    cfg.assert_consumed()

    return make_platform_stage_block(
        inputs,
        instance_id=instance_id,
        family=FAMILY,
        kind_id=KIND_ID,
        params=lambda _platform: {"properties": dict(properties)},
    )


STAGE = StageRef(
    id=KIND_ID,
    builder=_build,
    doc="Generate the Gradle project for an Android-family platform.",
    source="platform_setup.stages.platforms._shared.configure_platform",
    tags=("platforms", FAMILY),
    kind="action",
    io=StageIO(requires=("platform_builds_dir",), provides=("platform_project",)),
)
