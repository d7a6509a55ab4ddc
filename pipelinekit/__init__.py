"""Reusable pipeline kernel: node execution plus a small stage authoring kit.

`pipelinekit` never imports `platform_setup.*`. Which stages make up a run, their
order, and what a skipped or failed stage means for the run are conventions of
the consuming application.
"""

from pipelinekit.config_namespace import ConfigNamespace
from pipelinekit.engine.pipeline import (
    ActionStep,
    Block,
    DefaultStepRecorder,
    FlowContext,
    Node,
    NullStepRecorder,
    StepRecorder,
    StepRunner,
    json_safe,
    utc_now_iso8601,
)
from pipelinekit.stage_registry import StageRegistry
from pipelinekit.stage_types import StageBuilder, StageIO, StageRef

__all__ = [
    "ActionStep",
    "Block",
    "ConfigNamespace",
    "DefaultStepRecorder",
    "FlowContext",
    "Node",
    "NullStepRecorder",
    "StageBuilder",
    "StageIO",
    "StageRef",
    "StageRegistry",
    "StepRecorder",
    "StepRunner",
    "json_safe",
    "utc_now_iso8601",
]
