"""Template-based platform project writer.

Each platform's project is generated by copying `<templates>/<platform>/` into
`<platform_builds>/<app_id>_<platform>/`. Re-running overwrites template files
and leaves extra files in the project alone.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from typing import Any

from platform_setup.foundation import fs
from platform_setup.framework.context import OrchestrationContext
from platform_setup.framework.errors import MissingPrerequisiteError
from platform_setup.framework.platforms import family_of, parse_platform

PROJECT_MANIFEST_NAME = "platform.json"
LOCAL_PROPERTIES_NAME = "local.properties"


def project_dir(context: OrchestrationContext, platform: str) -> str:
    return os.path.join(context.platform_builds_dir, f"{context.app_id}_{platform}")


def render_properties(properties: Mapping[str, str]) -> str:
    lines = [f"{key}={value}" for key, value in sorted(properties.items())]
    return "\n".join(lines) + "\n" if lines else ""


class TemplateProjectWriter:
    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    def write_project(
        self, context: OrchestrationContext, platform: str, **params: Any
    ) -> dict[str, Any]:
        platform = parse_platform(platform)
        template_dir = os.path.join(context.platform_templates_dir, platform)
        if not os.path.isdir(template_dir):
            raise MissingPrerequisiteError(f"Platform template not found: {template_dir}")

        dest = project_dir(context, platform)
        copied = fs.copy_folder_contents(template_dir, dest)
        self._logger.debug("Copied %d template file(s) into %s", len(copied), dest)

        properties = params.get("properties")
        if properties:
            with open(os.path.join(dest, LOCAL_PROPERTIES_NAME), "w", encoding="utf-8") as handle:
                handle.write(render_properties(properties))

        manifest = {
            "platform": platform,
            "family": family_of(platform),
            "app_id": context.app_id,
            "app_config_id": context.app_config_id,
            "params": {key: params[key] for key in sorted(params)},
        }
        with open(os.path.join(dest, PROJECT_MANIFEST_NAME), "w", encoding="utf-8") as handle:
            json.dump(manifest, handle, ensure_ascii=False, indent=2)
            handle.write("\n")

        return {"project_dir": dest, "files": len(copied)}
