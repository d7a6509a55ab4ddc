"""YAML settings loading: one explicit file, or the project's base file plus a local overlay."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

import yaml

CONFIG_ENV_VAR = "PLATFORM_SETUP_CONFIG"
ROOT_MARKERS = ("pyproject.toml", "package.json", ".git")
LOCAL_OVERLAY_NAME = "config.local.yaml"


def find_project_root(start: str | os.PathLike[str] | None = None) -> str:
    """Walk up from `start` (default: cwd) to the first directory holding a root marker."""

    origin = os.path.abspath(os.fspath(start) if start is not None else os.getcwd())
    if os.path.isfile(origin):
        origin = os.path.dirname(origin)

    current = origin
    while True:
        if any(os.path.exists(os.path.join(current, marker)) for marker in ROOT_MARKERS):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            raise FileNotFoundError(
                f"Cannot locate project root: searched from {origin} for {', '.join(ROOT_MARKERS)}"
            )
        current = parent


def read_yaml_mapping(path: str) -> dict[str, Any]:
    """Parse a YAML file whose top level must be a mapping (an empty file is `{}`)."""

    with open(path, "r", encoding="utf-8") as handle:
        try:
            payload = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"Config file must contain a YAML mapping: {path}")
    return dict(payload)


def _shape(value: Any) -> str:
    if isinstance(value, Mapping):
        return "mapping"
    if isinstance(value, (list, tuple)):
        return "list"
    return type(value).__name__


def merge_overlay(base: Any, overlay: Any, *, path: str = "") -> Any:
    """Apply `overlay` on top of `base`.

    Mappings merge key by key, lists are replaced whole, and an explicit null in
    the overlay clears the value. Changing a value's shape is an error.
    """

    if base is None or overlay is None:
        return overlay

    base_shape, overlay_shape = _shape(base), _shape(overlay)
    structured = ("mapping", "list")
    if base_shape != overlay_shape and (base_shape in structured or overlay_shape in structured):
        raise ValueError(
            f"Invalid config overlay merge at {path or '<root>'}: "
            f"base is {base_shape} but overlay is {overlay_shape}"
        )

    if base_shape == "mapping":
        merged = dict(base)
        for key, value in overlay.items():
            key_path = f"{path}.{key}" if path else str(key)
            merged[key] = merge_overlay(base[key], value, path=key_path) if key in base else value
        return merged
    if base_shape == "list":
        return list(overlay)
    return overlay


def _explicit_path(config_path: Any, env_var: str | None) -> tuple[str | None, str]:
    if config_path is not None:
        return (str(config_path).strip() or None), "explicit"
    if env_var:
        return (os.environ.get(env_var, "").strip() or None), "env"
    return None, "env"


def load_config(
    *,
    config_path: str | os.PathLike[str] | None = None,
    env_var: str | None = CONFIG_ENV_VAR,
    start_dir: str | os.PathLike[str] | None = None,
    config_rel_path: str = "config",
    config_name: str = "config",
    config_type: str = ".yaml",
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Load orchestrator settings from YAML.

    Resolution order:
      1) explicit `config_path`, or the file named by `env_var` (single file, no overlay)
      2) `<config dir>/<config_name><config_type>` deep-merged with `config.local.yaml`
         from the same directory. `<config dir>` is `config_rel_path` when absolute,
         otherwise relative to the project root discovered from `start_dir`.

    A missing base file loads as `{}`; the settings parser supplies defaults.

    Returns:
        (cfg, meta) where meta records `mode`, the files read, and the project root.
    """

    explicit, explicit_mode = _explicit_path(config_path, env_var)
    if explicit:
        resolved = os.path.abspath(os.path.expandvars(os.path.expanduser(explicit)))
        if not os.path.isfile(resolved):
            raise FileNotFoundError(f"Config file not found: {resolved}")
        meta = {"mode": explicit_mode, "paths": [resolved], "env_var": env_var, "project_root": None}
        return read_yaml_mapping(resolved), meta

    project_root: str | None = None
    config_dir = str(config_rel_path)
    if not os.path.isabs(config_dir):
        project_root = find_project_root(start_dir)
        config_dir = os.path.join(project_root, config_dir)

    meta: dict[str, Any] = {"mode": "defaults", "paths": [], "env_var": env_var, "project_root": project_root}
    base_path = os.path.join(config_dir, config_name + config_type)
    if not os.path.isfile(base_path):
        return {}, meta

    cfg: Any = read_yaml_mapping(base_path)
    meta["mode"] = "base"
    meta["paths"].append(os.path.abspath(base_path))

    overlay_path = os.path.join(config_dir, LOCAL_OVERLAY_NAME)
    if os.path.isfile(overlay_path):
        cfg = merge_overlay(cfg, read_yaml_mapping(overlay_path))
        meta["mode"] = "base+local"
        meta["paths"].append(os.path.abspath(overlay_path))
    return cfg, meta
