from __future__ import annotations

import os
from datetime import datetime
from typing import Any

from platform_setup.foundation.config_io import load_config
from platform_setup.foundation.logging_utils import close_logger, setup_operational_logger
from platform_setup.framework.collaborators import Collaborators
from platform_setup.framework.config import OrchestratorConfig
from platform_setup.framework.context import APP_CONFIG_FILE_NAME, build_context
from platform_setup.framework.pipeline import PipelineResult
from platform_setup.framework.run_summary import write_run_summary
from platform_setup.impl.current.plans import build_pipeline
from platform_setup.stages.registry import get_stage_registry


def load_settings(
    *,
    project_root: str | None = None,
    config_path: str | None = None,
) -> tuple[OrchestratorConfig, list[str], dict[str, Any]]:
    """Load YAML settings and parse them, returning (config, warnings, load meta).

    With an explicit `project_root` the config folder is `<project_root>/config`;
    otherwise the project root is discovered from the working directory.
    """

    if project_root:
        root = os.path.abspath(project_root)
        cfg_dict, meta = load_config(
            config_path=config_path,
            config_rel_path=os.path.join(root, "config"),
        )
    else:
        cfg_dict, meta = load_config(config_path=config_path)
        root = meta.get("project_root") or os.getcwd()

    config, warnings = OrchestratorConfig.from_dict(cfg_dict, project_root=root)
    return config, warnings, meta


def generate_run_id(app_config_id: str) -> str:
    return f"{app_config_id}_{datetime.now().strftime('%Y%m%d_%H%M%S')}"


def _summary_path(config: OrchestratorConfig, run_id: str) -> str | None:
    if not config.logging.log_dir or not config.logging.write_summary:
        return None
    return os.path.join(config.logging.log_dir, f"{run_id}_summary.json")


def run_configure(
    config: OrchestratorConfig,
    *,
    app_config_id: str | None = None,
    collaborators: Collaborators | None = None,
    run_id: str | None = None,
    warnings: list[str] | None = None,
) -> PipelineResult:
    """Run the configure pipeline for one app config.

    The first stage failure is re-raised unchanged after the run summary (when
    enabled) has been written.
    """

    context = build_context(config, app_config_id=app_config_id)
    run_id = run_id or generate_run_id(context.app_config_id)
    logger, log_file = setup_operational_logger(
        config.logging.log_dir, run_id, level=config.logging.level_no
    )
    summary_path = _summary_path(config, run_id)
    try:
        for warning in warnings or ():
            logger.warning("Config: %s", warning)
        logger.info("Project root: %s", context.project_root)
        logger.info("App config: %s (app id %s)", context.app_config_id, context.app_id)

        pipeline = build_pipeline(config, collaborators=collaborators, logger=logger)
        try:
            result = pipeline.run(context)
        except Exception as exc:
            failed = getattr(exc, "pipeline_result", None)
            if summary_path and isinstance(failed, PipelineResult):
                write_run_summary(summary_path, failed)
                logger.info("Wrote run summary to %s", summary_path)
            raise

        if summary_path:
            write_run_summary(summary_path, result)
            logger.info("Wrote run summary to %s", summary_path)
        if log_file:
            logger.info("Operational log stored at %s", log_file)
        return result
    finally:
        close_logger(logger)


def list_app_configs(config: OrchestratorConfig) -> list[str]:
    """App config ids: folders under the app configs root holding a config.json."""

    root = config.paths.app_configs
    if not os.path.isdir(root):
        return []
    return sorted(
        name
        for name in os.listdir(root)
        if os.path.isfile(os.path.join(root, name, APP_CONFIG_FILE_NAME))
    )


def describe_setup(config: OrchestratorConfig, *, app_config_id: str | None = None) -> dict[str, Any]:
    return build_context(config, app_config_id=app_config_id).describe()


def show_info(config: OrchestratorConfig, *, app_config_id: str | None = None) -> None:
    info = describe_setup(config, app_config_id=app_config_id)
    for key in (
        "project_root",
        "app_config_id",
        "app_id",
        "app_config_path",
        "platform_builds_dir",
        "platform_assets_dir",
        "global_config_dir",
        "plugins_dir",
        "dependencies_dir",
        "platform_templates_dir",
    ):
        print(f"{key}\t{info[key]}")
    print(f"active_platforms\t{', '.join(info['active_platforms']) or '<none>'}")


def list_stages(*, tag: str | None = None) -> None:
    for entry in get_stage_registry().describe(tag=tag):
        doc = entry.get("doc") or ""
        print(f"{entry['stage_id']}\t{doc}")
