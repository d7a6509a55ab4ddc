import pytest

from pipelinekit.config_namespace import ConfigNamespace


def test_config_namespace_get_str_is_strict_about_type():
    ns = ConfigNamespace({"bootstrap_app_config": 3}, path="stages.bootstrap.scaffold")
    with pytest.raises(TypeError, match=r"must be a string"):
        ns.get_str("bootstrap_app_config")


def test_config_namespace_get_str_validates_choices():
    ns = ConfigNamespace({"missing_overrides": "ignore"}, path="stages.staging.plugin_overrides")
    with pytest.raises(ValueError, match=r"must be one of: error, skip"):
        ns.get_str("missing_overrides", default="error", choices=("error", "skip"))


def test_config_namespace_get_str_default_counts_as_consumed():
    ns = ConfigNamespace({}, path="stages.test")
    assert ns.get_str("name", default="helloWorld") == "helloWorld"
    assert ns.consumed_keys() == ("name",)


def test_config_namespace_get_optional_list_str():
    ns = ConfigNamespace({"items": [" a ", "b"], "none": None}, path="stages.test")
    assert ns.get_optional_list_str("items") == ["a", "b"]
    assert ns.get_optional_list_str("none") is None

    bad = ConfigNamespace({"items": ["a", 3]}, path="stages.test")
    with pytest.raises(TypeError, match=r"stages.test.items\[1\] must be a string"):
        bad.get_optional_list_str("items")


def test_config_namespace_get_mapping_str_renders_scalars():
    ns = ConfigNamespace({"properties": {"a": 1, "b": True, "c": "x"}}, path="stages.platforms.gradle")
    assert ns.get_mapping_str("properties") == {"a": "1", "b": "true", "c": "x"}

    nested = ConfigNamespace({"properties": {"a": {"b": 1}}}, path="stages.platforms.gradle")
    with pytest.raises(TypeError, match=r"must be a scalar"):
        nested.get_mapping_str("properties")


def test_config_namespace_missing_required_key_raises():
    ns = ConfigNamespace({}, path="stages.test")
    with pytest.raises(ValueError, match=r"Missing required config key: stages.test.name"):
        ns.get_str("name")


def test_config_namespace_assert_consumed_reports_unknown_keys():
    ns = ConfigNamespace({"known": "x", "typo": 1}, path="stages.test")
    ns.get_str("known")
    with pytest.raises(ValueError, match=r"Unknown config keys under stages.test: typo"):
        ns.assert_consumed()
