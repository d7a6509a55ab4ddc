"""The default configure plan and its wiring to the stage registry and collaborators."""

from __future__ import annotations

import logging

from pipelinekit.engine.pipeline import StepRecorder
from platform_setup.framework.collaborators import Collaborators
from platform_setup.framework.config import OrchestratorConfig
from platform_setup.framework.pipeline import ConfigurationPipeline, PlanEntry
from platform_setup.framework.platforms import ALL_FAMILIES, PIPELINE_PLATFORM_ORDER, family_of
from platform_setup.impl.current.template_writer import TemplateProjectWriter
from platform_setup.impl.current.tizen_certificate import TizenCertificateGenerator
from platform_setup.stages.bootstrap.credentials import KIND_ID as CREDENTIALS
from platform_setup.stages.bootstrap.scaffold import KIND_ID as SCAFFOLD
from platform_setup.stages.platforms.android import KIND_ID as GRADLE
from platform_setup.stages.platforms.apple import KIND_ID as XCODE
from platform_setup.stages.platforms.electron import KIND_ID as ELECTRON
from platform_setup.stages.platforms.kaios import KIND_ID as KAIOS
from platform_setup.stages.platforms.tizen import KIND_ID as TIZEN
from platform_setup.stages.platforms.web import KIND_ID as WEB
from platform_setup.stages.platforms.webos import KIND_ID as WEBOS
from platform_setup.stages.registry import get_stage_registry
from platform_setup.stages.staging.plugin_overrides import KIND_ID as PLUGIN_OVERRIDES
from platform_setup.stages.staging.runtime_assets import KIND_ID as RUNTIME_ASSETS

CONFIGURATOR_KINDS: dict[str, str] = {
    "android": GRADLE,
    "apple": XCODE,
    "tizen": TIZEN,
    "webos": WEBOS,
    "web": WEB,
    "electron": ELECTRON,
    "kaios": KAIOS,
}


def default_plan() -> tuple[PlanEntry, ...]:
    entries = [
        PlanEntry(stage_id=CREDENTIALS, instance_id="credentials", state="CREDENTIAL_BOOTSTRAP"),
        PlanEntry(stage_id=SCAFFOLD, instance_id="scaffold", state="SCAFFOLD_CHECK"),
        PlanEntry(stage_id=RUNTIME_ASSETS, instance_id="runtime_assets", state="ASSET_STAGE"),
        PlanEntry(stage_id=PLUGIN_OVERRIDES, instance_id="plugin_overrides", state="PLUGIN_INSTALL"),
    ]
    for platform in PIPELINE_PLATFORM_ORDER:
        entries.append(
            PlanEntry(
                stage_id=CONFIGURATOR_KINDS[family_of(platform)],
                instance_id=platform,
                state="PLATFORM_CONFIG",
            )
        )
    return tuple(entries)


def default_collaborators(*, logger: logging.Logger | None = None) -> Collaborators:
    writer = TemplateProjectWriter(logger=logger)
    return Collaborators(
        credential_generators={"tizen_author": TizenCertificateGenerator(logger=logger)},
        project_writers={family: writer for family in ALL_FAMILIES},
    )


def build_pipeline(
    config: OrchestratorConfig,
    *,
    collaborators: Collaborators | None = None,
    logger: logging.Logger | None = None,
    recorder: StepRecorder | None = None,
) -> ConfigurationPipeline:
    return ConfigurationPipeline(
        registry=get_stage_registry(),
        plan=default_plan(),
        collaborators=collaborators or default_collaborators(logger=logger),
        stage_configs=config.stage_configs,
        logger=logger,
        recorder=recorder,
    )
