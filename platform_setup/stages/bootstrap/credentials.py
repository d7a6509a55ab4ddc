from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pipelinekit.config_namespace import ConfigNamespace
from pipelinekit.stage_types import StageIO, StageRef
from platform_setup.framework.activation import is_family_active
from platform_setup.framework.collaborators import CredentialGenerator
from platform_setup.framework.errors import MissingPrerequisiteError
from platform_setup.framework.pipeline import PipelineInputs
from platform_setup.framework.platforms import ALL_FAMILIES
from platform_setup.framework.runtime import RunContext
from platform_setup.framework.stage_blocks import make_action_stage_block

KIND_ID = "bootstrap.credentials"


@dataclass(frozen=True)
class CredentialSpec:
    credential_id: str
    filename: str


# Signing credentials a family needs before its projects can be configured.
CREDENTIAL_REQUIREMENTS: Mapping[str, tuple[CredentialSpec, ...]] = {
    "tizen": (CredentialSpec(credential_id="tizen_author", filename="tizen_author.p12"),),
}


def credential_path(run: RunContext, spec: CredentialSpec) -> str:
    return os.path.join(run.context.global_config_dir, spec.filename)


def ensure_credentials(
    run: RunContext,
    family: str,
    generators: Mapping[str, CredentialGenerator],
) -> list[dict[str, Any]]:
    """Make sure every credential `family` requires exists, generating missing ones once."""

    results: list[dict[str, Any]] = []
    for spec in CREDENTIAL_REQUIREMENTS.get(family, ()):
        path = credential_path(run, spec)
        if os.path.exists(path):
            run.logger.info("%s exists: %s", spec.filename, path)
            results.append({"credential": spec.credential_id, "path": path, "generated": False})
            continue

        generator = generators.get(spec.credential_id)
        if generator is None:
            raise MissingPrerequisiteError(
                f"{spec.filename} is missing and no generator is registered for {spec.credential_id!r}"
            )

        run.logger.warning("%s missing; creating one at %s", spec.filename, path)
        generator.generate(run.context, path)
        results.append({"credential": spec.credential_id, "path": path, "generated": True})
    return results


def _build(inputs: PipelineInputs, *, instance_id: str, cfg: ConfigNamespace):
    cfg.assert_consumed()
    generators = inputs.collaborators.credential_generators

    def _action(run: RunContext) -> dict[str, Any]:
        ensured: list[dict[str, Any]] = []
        for family in ALL_FAMILIES:
            if family not in CREDENTIAL_REQUIREMENTS:
                continue
            if not is_family_active(run.context, family):
                run.logger.debug("Skipping credentials for inactive family %s", family)
                continue
            ensured.extend(ensure_credentials(run, family, generators))
        return {"credentials": ensured}

    return make_action_stage_block(instance_id, fn=_action)


STAGE = StageRef(
    id=KIND_ID,
    builder=_build,
    doc="Ensure signing credentials exist for every active family that needs one.",
    source="platform_setup.stages.bootstrap.credentials.ensure_credentials",
    tags=("bootstrap",),
    kind="action",
    io=StageIO(provides=("credentials",)),
)
