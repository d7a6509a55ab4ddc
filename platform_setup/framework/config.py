from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping

DEFAULT_PATHS: Mapping[str, str] = {
    "platform_builds": "platformBuilds",
    "platform_assets": "platformAssets",
    "app_configs": "appConfigs",
    "global_config": "~/.rnv",
    "plugins": "plugins",
    "dependencies": "node_modules",
    "platform_templates": "platformTemplates",
}

LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR")


def parse_bool(value: Any, path: str) -> bool:
    """
    Strict boolean parsing to avoid bool('false') footguns.

    Accepts:
      - True/False
      - 0/1 (ints)
      - strings: true/false/1/0/yes/no (case-insensitive, surrounding whitespace ignored)

    Raises:
      ValueError for anything else, with the provided config key path.
    """

    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError(f"Invalid boolean for {path}: {value!r}")
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "1", "yes"}:
            return True
        if normalized in {"false", "0", "no"}:
            return False
        raise ValueError(f"Invalid boolean for {path}: {value!r}")

    raise ValueError(f"Invalid boolean for {path}: {value!r}")


def parse_optional_str(value: Any, path: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Invalid config type for {path}: expected string, got {type(value).__name__}")
    trimmed = value.strip()
    return trimmed or None


def resolve_path(value: str, *, base_dir: str) -> str:
    """Expand `~`/env vars and anchor relative paths at `base_dir`."""

    expanded = os.path.expandvars(os.path.expanduser(value))
    if not os.path.isabs(expanded):
        expanded = os.path.join(base_dir, expanded)
    return os.path.abspath(expanded)


@dataclass(frozen=True)
class PathsConfig:
    platform_builds: str
    platform_assets: str
    app_configs: str
    global_config: str
    plugins: str
    dependencies: str
    platform_templates: str


@dataclass(frozen=True)
class LoggingConfig:
    log_dir: str | None = None
    level: str = "INFO"
    write_summary: bool = True

    @property
    def level_no(self) -> int:
        return getattr(logging, self.level)


@dataclass(frozen=True)
class OrchestratorConfig:
    project_root: str
    app_config: str | None
    paths: PathsConfig
    logging: LoggingConfig
    stage_configs: Mapping[str, Mapping[str, Any]]

    @staticmethod
    def from_dict(
        cfg: Mapping[str, Any],
        *,
        project_root: str | None = None,
    ) -> tuple["OrchestratorConfig", list[str]]:
        """
        Parse and validate orchestrator settings, returning (OrchestratorConfig, warnings).

        `project_root` is the fallback when `project.root` is unset; relative
        `project.root` values are anchored at it (or the working directory).

        Raises:
            ValueError: if keys are invalid, or unknown while `strict: true`.
        """

        if not isinstance(cfg, Mapping):
            raise ValueError("Config must be a mapping")

        warnings: list[str] = []

        strict_unknown_keys = False
        if "strict" in cfg:
            strict_unknown_keys = parse_bool(cfg.get("strict"), "strict")

        schema: Mapping[str, Any] = {
            "strict": None,
            "project": {"root": None, "app_config": None},
            "paths": {key: None for key in DEFAULT_PATHS},
            "logging": {"log_dir": None, "level": None, "write_summary": None},
            "stages": None,
        }

        def collect_unknown_keys(mapping: Any, subschema: Mapping[str, Any], *, prefix: str) -> list[str]:
            if not isinstance(mapping, Mapping):
                return []
            unknown: list[str] = []
            for key, value in mapping.items():
                key_path = f"{prefix}.{key}" if prefix else str(key)
                if key not in subschema:
                    unknown.append(key_path)
                    continue
                child = subschema.get(key)
                if isinstance(child, Mapping):
                    unknown.extend(collect_unknown_keys(value, child, prefix=key_path))
            return unknown

        unknown_keys = collect_unknown_keys(cfg, schema, prefix="")
        if unknown_keys:
            message = f"Unknown config keys: {', '.join(sorted(unknown_keys))}"
            if strict_unknown_keys:
                raise ValueError(message)
            warnings.append(message)

        def section(name: str) -> Mapping[str, Any]:
            raw = cfg.get(name)
            if raw is None:
                return {}
            if not isinstance(raw, Mapping):
                raise ValueError(f"Invalid config type for {name}: expected mapping, got {type(raw).__name__}")
            return raw

        project_cfg = section("project")
        base_dir = os.path.abspath(project_root or os.getcwd())
        raw_root = parse_optional_str(project_cfg.get("root"), "project.root")
        resolved_root = resolve_path(raw_root, base_dir=base_dir) if raw_root else base_dir

        app_config = parse_optional_str(project_cfg.get("app_config"), "project.app_config")

        paths_cfg = section("paths")
        resolved_paths: dict[str, str] = {}
        for key, default in DEFAULT_PATHS.items():
            raw_value = parse_optional_str(paths_cfg.get(key), f"paths.{key}")
            resolved_paths[key] = resolve_path(raw_value or default, base_dir=resolved_root)

        logging_cfg = section("logging")
        raw_log_dir = parse_optional_str(logging_cfg.get("log_dir"), "logging.log_dir")
        log_dir = resolve_path(raw_log_dir, base_dir=resolved_root) if raw_log_dir else None
        level = (parse_optional_str(logging_cfg.get("level"), "logging.level") or "INFO").upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid config value for logging.level: {level!r} (expected one of: {', '.join(LOG_LEVELS)})"
            )
        write_summary = True
        if "write_summary" in logging_cfg:
            write_summary = parse_bool(logging_cfg.get("write_summary"), "logging.write_summary")

        stage_configs: dict[str, Mapping[str, Any]] = {}
        for stage_id, options in section("stages").items():
            if not isinstance(stage_id, str) or not stage_id.strip():
                raise ValueError("stages keys must be non-empty stage kind ids")
            if options is None:
                options = {}
            if not isinstance(options, Mapping):
                raise ValueError(
                    f"Invalid config type for stages.{stage_id}: expected mapping, got {type(options).__name__}"
                )
            stage_configs[stage_id.strip()] = dict(options)

        config = OrchestratorConfig(
            project_root=resolved_root,
            app_config=app_config,
            paths=PathsConfig(**resolved_paths),
            logging=LoggingConfig(log_dir=log_dir, level=level, write_summary=write_summary),
            stage_configs=stage_configs,
        )
        return config, warnings
