"""The per-run orchestration context and the app-config reader that feeds it.

An `OrchestrationContext` is an immutable value. Nested bootstrap runs receive a
derived copy (`derive`); paths never change between a run and its nested run.
"""

from __future__ import annotations

import dataclasses
import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from platform_setup.framework.config import OrchestratorConfig, parse_bool
from platform_setup.framework.errors import MissingPrerequisiteError
from platform_setup.framework.platforms import ALL_PLATFORMS, PIPELINE_PLATFORM_ORDER, parse_platform

APP_CONFIG_FILE_NAME = "config.json"
SUB_COMMAND_CONFIGURE = "configure"

_DERIVABLE_FIELDS = frozenset(
    {"enabled_platforms", "app_config_id", "app_id", "sub_command", "bootstrap_depth"}
)


@dataclass(frozen=True)
class AppConfig:
    config_id: str
    app_id: str
    enabled_platforms: Mapping[str, bool]
    path: str


def parse_enabled_platforms(raw: Any, path: str) -> dict[str, bool]:
    """Normalize a `platforms` section into a full platform -> enabled mapping.

    Entries may be booleans or mappings with an optional `isActive` flag; an entry
    that exists without `isActive` counts as enabled. Missing platforms are disabled.
    """

    enabled = {platform: False for platform in ALL_PLATFORMS}
    if raw is None:
        return enabled
    if not isinstance(raw, Mapping):
        raise ValueError(f"Invalid {path}: expected mapping, got {type(raw).__name__}")

    for key, entry in raw.items():
        platform = parse_platform(key, f"{path}.{key}")
        if isinstance(entry, Mapping):
            flag = entry.get("isActive", True)
            enabled[platform] = parse_bool(flag, f"{path}.{key}.isActive")
        else:
            enabled[platform] = parse_bool(entry, f"{path}.{key}")
    return enabled


def read_app_config(app_configs_dir: str, config_id: str) -> AppConfig:
    config_path = os.path.join(app_configs_dir, config_id, APP_CONFIG_FILE_NAME)
    if not os.path.isfile(config_path):
        raise MissingPrerequisiteError(f"App config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {config_path}: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise ValueError(f"App config file must contain a JSON object: {config_path}")

    raw_id = payload.get("id")
    if raw_id is not None and (not isinstance(raw_id, str) or not raw_id.strip()):
        raise ValueError(f"Invalid app id in {config_path}: {raw_id!r}")

    return AppConfig(
        config_id=config_id,
        app_id=raw_id.strip() if isinstance(raw_id, str) else config_id,
        enabled_platforms=parse_enabled_platforms(payload.get("platforms"), f"{config_path}:platforms"),
        path=config_path,
    )


@dataclass(frozen=True)
class OrchestrationContext:
    project_root: str
    platform_builds_dir: str
    platform_assets_dir: str
    app_config_dir: str
    app_config_path: str
    global_config_dir: str
    plugins_dir: str
    dependencies_dir: str
    platform_templates_dir: str
    enabled_platforms: Mapping[str, bool]
    app_config_id: str
    app_id: str
    sub_command: str = SUB_COMMAND_CONFIGURE
    bootstrap_depth: int = 0

    def __post_init__(self) -> None:
        normalized = {platform: False for platform in ALL_PLATFORMS}
        for key, value in dict(self.enabled_platforms).items():
            normalized[parse_platform(key, "enabled_platforms")] = bool(value)
        object.__setattr__(self, "enabled_platforms", normalized)
        if self.bootstrap_depth < 0:
            raise ValueError("bootstrap_depth must be >= 0")

    def active_platforms(self) -> tuple[str, ...]:
        return tuple(p for p in PIPELINE_PLATFORM_ORDER if self.enabled_platforms.get(p, False))

    def derive(self, **changes: Any) -> "OrchestrationContext":
        illegal = sorted(set(changes) - _DERIVABLE_FIELDS)
        if illegal:
            raise ValueError(f"Derived contexts cannot change: {', '.join(illegal)}")
        return dataclasses.replace(self, **changes)

    def describe(self) -> dict[str, Any]:
        payload = dataclasses.asdict(self)
        payload["enabled_platforms"] = dict(self.enabled_platforms)
        payload["active_platforms"] = list(self.active_platforms())
        return payload


def build_context(
    config: OrchestratorConfig,
    *,
    app_config_id: str | None = None,
    sub_command: str = SUB_COMMAND_CONFIGURE,
) -> OrchestrationContext:
    """Resolve every path for one run and read the active app config's platform flags."""

    config_id = app_config_id or config.app_config
    if not config_id:
        raise ValueError("No app config selected: set project.app_config or pass --app-config")

    app_config = read_app_config(config.paths.app_configs, config_id)
    return OrchestrationContext(
        project_root=config.project_root,
        platform_builds_dir=config.paths.platform_builds,
        platform_assets_dir=config.paths.platform_assets,
        app_config_dir=os.path.dirname(app_config.path),
        app_config_path=app_config.path,
        global_config_dir=config.paths.global_config,
        plugins_dir=config.paths.plugins,
        dependencies_dir=config.paths.dependencies,
        platform_templates_dir=config.paths.platform_templates,
        enabled_platforms=app_config.enabled_platforms,
        app_config_id=app_config.config_id,
        app_id=app_config.app_id,
        sub_command=sub_command,
    )
