from __future__ import annotations

from pipelinekit.config_namespace import ConfigNamespace
from pipelinekit.stage_types import StageIO, StageRef
from platform_setup.framework.pipeline import PipelineInputs
from platform_setup.stages.platforms._shared import make_platform_stage_block

KIND_ID = "platforms.kaios"
FAMILY = "kaios"


def _build(inputs: PipelineInputs, *, instance_id: str, cfg: ConfigNamespace):
    cfg.assert_consumed()
    return make_platform_stage_block(inputs, instance_id=instance_id, family=FAMILY, kind_id=KIND_ID)


STAGE = StageRef(
    id=KIND_ID,
    builder=_build,
    doc="Generate the KaiOS project.",
    source="platform_setup.stages.platforms._shared.configure_platform",
    tags=("platforms", FAMILY),
    kind="action",
    io=StageIO(requires=("platform_builds_dir",), provides=("platform_project",)),
)
