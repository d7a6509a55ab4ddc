import json

import pytest

from platform_setup.framework.activation import is_family_active, is_platform_active, skipped_result
from platform_setup.framework.context import build_context, parse_enabled_platforms, read_app_config
from platform_setup.framework.errors import MissingPrerequisiteError
from platform_setup.framework.platforms import ALL_PLATFORMS, family_of, parse_platform


def test_parse_enabled_platforms_accepts_bools_and_is_active_mappings():
    enabled = parse_enabled_platforms(
        {"android": True, "web": {"isActive": False}, "tizen": {}, "ios": {"isActive": "yes"}},
        "platforms",
    )

    assert set(enabled) == set(ALL_PLATFORMS)
    assert enabled["android"] is True
    assert enabled["web"] is False
    assert enabled["tizen"] is True
    assert enabled["ios"] is True
    assert enabled["kaios"] is False


def test_parse_enabled_platforms_rejects_unknown_platform():
    with pytest.raises(ValueError, match=r"Unknown platform for platforms.symbian"):
        parse_enabled_platforms({"symbian": True}, "platforms")


def test_read_app_config_defaults_app_id_to_config_id(project):
    app_config = read_app_config(str(project / "appConfigs"), "helloWorld")

    assert app_config.app_id == "helloWorld"
    assert app_config.enabled_platforms["android"] is True


def test_read_app_config_missing_file_raises(project):
    with pytest.raises(MissingPrerequisiteError, match=r"App config file not found"):
        read_app_config(str(project / "appConfigs"), "nope")


def test_read_app_config_invalid_json_raises(project):
    (project / "appConfigs" / "myApp" / "config.json").write_text("{nope", encoding="utf-8")
    with pytest.raises(ValueError, match=r"Invalid JSON"):
        read_app_config(str(project / "appConfigs"), "myApp")


def test_build_context_resolves_paths_and_active_platforms(project, make_config):
    context = build_context(make_config())

    assert context.project_root == str(project)
    assert context.app_config_id == "myApp"
    assert context.app_id == "com.example.app"
    assert context.app_config_path == str(project / "appConfigs" / "myApp" / "config.json")
    assert context.platform_builds_dir == str(project / "platformBuilds")
    assert context.active_platforms() == ("android", "web")
    assert context.bootstrap_depth == 0


def test_build_context_requires_an_app_config(make_config):
    with pytest.raises(ValueError, match=r"No app config selected"):
        build_context(make_config(project={}))


def test_active_platforms_follow_pipeline_order(project, make_config):
    path = project / "appConfigs" / "myApp" / "config.json"
    path.write_text(json.dumps({"platforms": {p: True for p in ALL_PLATFORMS}}), encoding="utf-8")

    context = build_context(make_config())

    assert context.active_platforms()[:4] == ("android", "androidtv", "androidwear", "tizen")
    assert context.active_platforms()[-2:] == ("ios", "tvos")


def test_derive_only_changes_run_identity(make_config):
    context = build_context(make_config())

    derived = context.derive(app_config_id="helloWorld", bootstrap_depth=1)
    assert derived.app_config_id == "helloWorld"
    assert derived.platform_builds_dir == context.platform_builds_dir
    assert context.bootstrap_depth == 0

    with pytest.raises(ValueError, match=r"cannot change: platform_builds_dir"):
        context.derive(platform_builds_dir="/elsewhere")


def test_activation_gate(make_config):
    context = build_context(make_config())

    assert is_platform_active(context, "android") is True
    assert is_platform_active(context, "ios") is False
    assert is_family_active(context, "android") is True
    assert is_family_active(context, "tizen") is False
    assert skipped_result("ios") == {"platform": "ios", "skipped": True}

    with pytest.raises(ValueError, match=r"Unknown platform"):
        is_platform_active(context, "symbian")
    with pytest.raises(ValueError, match=r"Unknown platform family"):
        is_family_active(context, "symbian")


def test_platform_families():
    assert family_of("androidtv") == "android"
    assert family_of("tvos") == "apple"
    assert family_of("windows") == "electron"
    assert parse_platform(" WebOS ") == "webos"
