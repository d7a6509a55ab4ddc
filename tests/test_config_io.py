import os
from pathlib import Path

import pytest

from platform_setup.foundation.config_io import find_project_root, load_config


def test_load_config_base_only(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_PLATFORM_SETUP_CONFIG", raising=False)
    (tmp_path / "config.yaml").write_text("a: 1\nb:\n  c: 2\n", encoding="utf-8")

    cfg, meta = load_config(config_rel_path=str(tmp_path), env_var="TEST_PLATFORM_SETUP_CONFIG")

    assert cfg == {"a": 1, "b": {"c": 2}}
    assert meta["mode"] == "base"
    assert os.path.basename(meta["paths"][0]) == "config.yaml"


def test_load_config_base_plus_local_overlay(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_PLATFORM_SETUP_CONFIG", raising=False)
    (tmp_path / "config.yaml").write_text("a: 1\nb:\n  c: 2\n", encoding="utf-8")
    (tmp_path / "config.local.yaml").write_text("b:\n  c: 3\n  d: 4\n", encoding="utf-8")

    cfg, meta = load_config(config_rel_path=str(tmp_path), env_var="TEST_PLATFORM_SETUP_CONFIG")

    assert cfg == {"a": 1, "b": {"c": 3, "d": 4}}
    assert meta["mode"] == "base+local"
    assert len(meta["paths"]) == 2


def test_load_config_overlay_type_mismatch_raises(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_PLATFORM_SETUP_CONFIG", raising=False)
    (tmp_path / "config.yaml").write_text("a:\n  b: 1\n", encoding="utf-8")
    (tmp_path / "config.local.yaml").write_text("a: [1, 2]\n", encoding="utf-8")

    with pytest.raises(ValueError, match=r"Invalid config overlay merge at a"):
        load_config(config_rel_path=str(tmp_path), env_var="TEST_PLATFORM_SETUP_CONFIG")


def test_load_config_invalid_yaml_raises_value_error(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_PLATFORM_SETUP_CONFIG", raising=False)
    (tmp_path / "config.yaml").write_text("a: [1, 2\n", encoding="utf-8")

    with pytest.raises(ValueError, match=r"Invalid YAML"):
        load_config(config_rel_path=str(tmp_path), env_var="TEST_PLATFORM_SETUP_CONFIG")


def test_load_config_env_var_selects_single_file(tmp_path, monkeypatch):
    (tmp_path / "config.yaml").write_text("a: 1\n", encoding="utf-8")
    (tmp_path / "config.local.yaml").write_text("a: 2\n", encoding="utf-8")
    monkeypatch.setenv("TEST_PLATFORM_SETUP_CONFIG", str(tmp_path / "config.yaml"))

    cfg, meta = load_config(env_var="TEST_PLATFORM_SETUP_CONFIG")

    assert cfg == {"a": 1}
    assert meta["mode"] == "env"


def test_load_config_missing_explicit_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError, match=r"Config file not found"):
        load_config(config_path=str(tmp_path / "nope.yaml"), env_var=None)


def test_load_config_without_base_file_returns_defaults_mode(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_PLATFORM_SETUP_CONFIG", raising=False)

    cfg, meta = load_config(config_rel_path=str(tmp_path), env_var="TEST_PLATFORM_SETUP_CONFIG")

    assert cfg == {}
    assert meta["mode"] == "defaults"


def test_load_config_finds_project_root_from_subdir(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_PLATFORM_SETUP_CONFIG", raising=False)
    (tmp_path / "package.json").write_text("{}", encoding="utf-8")
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "config.yaml").write_text("project:\n  app_config: myApp\n", encoding="utf-8")
    subdir = tmp_path / "src" / "nested"
    subdir.mkdir(parents=True)
    monkeypatch.chdir(subdir)

    cfg, meta = load_config(env_var="TEST_PLATFORM_SETUP_CONFIG")

    assert cfg == {"project": {"app_config": "myApp"}}
    assert Path(meta["project_root"]).resolve() == tmp_path.resolve()
    assert Path(find_project_root(subdir)).resolve() == tmp_path.resolve()
