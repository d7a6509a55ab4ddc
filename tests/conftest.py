import json
import logging
from pathlib import Path

import pytest

from platform_setup.framework.config import OrchestratorConfig
from platform_setup.framework.platforms import ALL_PLATFORMS


def _write_app_config(root: Path, config_id: str, platforms: dict, *, app_id: str | None = None) -> Path:
    config_dir = root / "appConfigs" / config_id
    (config_dir / "assets" / "runtime").mkdir(parents=True, exist_ok=True)
    payload: dict = {"platforms": platforms}
    if app_id is not None:
        payload["id"] = app_id
    path = config_dir / "config.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.fixture
def write_app_config():
    return _write_app_config


@pytest.fixture
def project(tmp_path) -> Path:
    """A minimal project tree with app config `myApp` (android + web active)."""

    root = tmp_path / "project"
    root.mkdir()
    (root / "package.json").write_text("{}", encoding="utf-8")

    _write_app_config(
        root,
        "myApp",
        {"android": {"isActive": True}, "web": True, "ios": {"isActive": False}},
        app_id="com.example.app",
    )
    runtime_dir = root / "appConfigs" / "myApp" / "assets" / "runtime"
    (runtime_dir / "fonts").mkdir()
    (runtime_dir / "fonts" / "a.ttf").write_text("font", encoding="utf-8")
    (runtime_dir / "logo.png").write_text("logo", encoding="utf-8")
    _write_app_config(root, "helloWorld", {"android": True})

    (root / "plugins").mkdir()
    (root / "node_modules").mkdir()
    for platform in ALL_PLATFORMS:
        template_dir = root / "platformTemplates" / platform
        template_dir.mkdir(parents=True)
        (template_dir / "README.txt").write_text(f"{platform} template", encoding="utf-8")
    (root / ".rnv").mkdir()
    return root


@pytest.fixture
def make_config(project):
    def _make(**overrides) -> OrchestratorConfig:
        cfg: dict = {
            "project": {"root": str(project), "app_config": "myApp"},
            "paths": {"global_config": str(project / ".rnv")},
        }
        cfg.update(overrides)
        config, _warnings = OrchestratorConfig.from_dict(cfg)
        return config

    return _make


@pytest.fixture
def quiet_logger() -> logging.Logger:
    logger = logging.getLogger("test.platform_setup")
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger
