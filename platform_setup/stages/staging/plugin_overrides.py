from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Literal

from pipelinekit.config_namespace import ConfigNamespace
from pipelinekit.stage_types import StageIO, StageRef
from platform_setup.foundation import fs
from platform_setup.framework.context import OrchestrationContext
from platform_setup.framework.errors import MissingPrerequisiteError
from platform_setup.framework.pipeline import PipelineInputs
from platform_setup.framework.runtime import RunContext
from platform_setup.framework.stage_blocks import make_action_stage_block

KIND_ID = "staging.plugin_overrides"

OVERRIDES_DIR_NAME = "overrides"

MissingOverridesPolicy = Literal["error", "skip"]
MISSING_OVERRIDES_POLICIES: tuple[str, ...] = ("error", "skip")


@dataclass(frozen=True)
class PluginOverrides:
    plugin: str
    source_dir: str
    files: tuple[str, ...]


def discover_plugin_overrides(
    plugins_dir: str,
    *,
    missing_overrides: MissingOverridesPolicy = "error",
) -> list[PluginOverrides]:
    """List every plugin's override files, in plugin-name order.

    Each directory under `plugins_dir` is a plugin. A plugin without an `overrides`
    folder is an error unless `missing_overrides="skip"`, which treats it as zero
    overrides.
    """

    if missing_overrides not in MISSING_OVERRIDES_POLICIES:
        raise ValueError(f"Invalid missing_overrides policy: {missing_overrides!r}")
    if not os.path.isdir(plugins_dir):
        raise MissingPrerequisiteError(f"Plugins folder not found: {plugins_dir}")

    records: list[PluginOverrides] = []
    for name in fs.list_dir(plugins_dir):
        plugin_dir = os.path.join(plugins_dir, name)
        if not os.path.isdir(plugin_dir):
            continue
        overrides_dir = os.path.join(plugin_dir, OVERRIDES_DIR_NAME)
        if not os.path.isdir(overrides_dir):
            if missing_overrides == "skip":
                records.append(PluginOverrides(plugin=name, source_dir=overrides_dir, files=()))
                continue
            raise MissingPrerequisiteError(f"Plugin {name!r} has no overrides folder: {overrides_dir}")
        files = tuple(fs.list_files_recursive(overrides_dir))
        records.append(PluginOverrides(plugin=name, source_dir=overrides_dir, files=files))
    return records


def install_plugin_overrides(
    context: OrchestrationContext, records: list[PluginOverrides]
) -> list[str]:
    """Copy discovered overrides onto `<dependencies>/<plugin>/`, overwriting existing files."""

    installed: list[str] = []
    for record in records:
        dest_root = os.path.join(context.dependencies_dir, record.plugin)
        for rel in record.files:
            installed.append(
                fs.copy_file(os.path.join(record.source_dir, rel), os.path.join(dest_root, rel))
            )
    return installed


def _build(inputs: PipelineInputs, *, instance_id: str, cfg: ConfigNamespace):
    missing_overrides = cfg.get_str(
        "missing_overrides",
        default="error",
        choices=MISSING_OVERRIDES_POLICIES,
    )
    cfg.assert_consumed()

    def _action(run: RunContext) -> dict[str, Any]:
        records = discover_plugin_overrides(
            run.context.plugins_dir,
            missing_overrides=missing_overrides,  # type: ignore[arg-type]
        )
        installed = install_plugin_overrides(run.context, records)
        for record in records:
            run.logger.info("Plugin %s: %d override(s)", record.plugin, len(record.files))
        return {
            "plugins": {record.plugin: list(record.files) for record in records},
            "installed": len(installed),
        }

    return make_action_stage_block(instance_id, fn=_action)


STAGE = StageRef(
    id=KIND_ID,
    builder=_build,
    doc="Copy each plugin's overrides folder on top of its installed dependency package.",
    source="platform_setup.stages.staging.plugin_overrides.install_plugin_overrides",
    tags=("staging",),
    kind="action",
    io=StageIO(provides=("dependency_overrides",)),
)
