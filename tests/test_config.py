"""
Tests for configuration loading and validation
"""

import json

import pytest

from aggregate_codegen.codegen.core.config import (
    ConfigError,
    ConfigManager,
    GeneratorConfig,
    NamingPolicy,
    load_config,
)
from aggregate_codegen.codegen.core.model import EntityKind


@pytest.fixture
def manager():
    return ConfigManager()


def test_default_config_is_es6(manager):
    config = manager.get_config()

    assert config.template_set == "es6"
    assert config.sub_module_name == "index.js"
    assert config.root_module_name == "index.js"
    assert config.emit_empty_root_index is True
    assert config.atomic is False
    assert config.policy_for(None) == NamingPolicy(".js", "aggregates", "Aggregate")
    assert config.policy_for(EntityKind.EVENT) == NamingPolicy(".js", "events", "Event")
    assert config.templates["sub_module"] == "module.j2"


def test_dataclass_defaults_match_es6(manager):
    assert GeneratorConfig() == manager.get_config()


def test_typescript_template_set(manager):
    config = manager.get_config(template_set="typescript")

    assert config.policy_for(EntityKind.COMMAND).extension == ".ts"
    assert config.sub_module_name == "index.ts"
    assert config.templates["sub_module"] == "index.j2"
    assert config.templates["root_module"] == "module.j2"


def test_partial_naming_override_is_merged(manager):
    config = manager.get_config(
        {"naming": {"fault": {"folder": "errors", "suffix": "Error"}}}
    )

    fault = config.policy_for(EntityKind.FAULT)
    assert fault == NamingPolicy(".js", "errors", "Error", False)
    assert config.policy_for(EntityKind.COMMAND).folder == "commands"


def test_unknown_keys_go_to_custom(manager):
    config = manager.get_config({"license": "MIT"})

    assert config.custom == {"license": "MIT"}


def test_json_config_file(manager, tmp_path):
    path = tmp_path / "codegen.json"
    path.write_text(json.dumps({"naming": {"event": {"prefix_aggregate_name": True}}}))

    config = manager.get_config(config_file=path)

    assert config.policy_for(EntityKind.EVENT).prefix_aggregate_name is True


def test_yaml_config_file_with_overrides(manager, tmp_path):
    path = tmp_path / "codegen.yaml"
    path.write_text("template_set: typescript\nroot_module_name: domain.ts\natomic: true\n")

    config = manager.get_config({"root_module_name": "all.ts"}, path)

    assert config.template_set == "typescript"
    assert config.root_module_name == "all.ts"
    assert config.atomic is True


def test_missing_config_file(manager, tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        manager.get_config(config_file=tmp_path / "missing.json")


def test_config_file_must_be_json_or_yaml(manager, tmp_path):
    path = tmp_path / "codegen.toml"
    path.write_text("x = 1")

    with pytest.raises(ConfigError, match="JSON or YAML"):
        manager.get_config(config_file=path)


def test_invalid_json_config_file(manager, tmp_path):
    path = tmp_path / "codegen.json"
    path.write_text("{not json")

    with pytest.raises(ConfigError, match="Invalid JSON"):
        manager.get_config(config_file=path)


def test_config_file_must_hold_mapping(manager, tmp_path):
    path = tmp_path / "codegen.yaml"
    path.write_text("- one\n- two\n")

    with pytest.raises(ConfigError, match="mapping"):
        manager.get_config(config_file=path)


def test_unknown_template_set(manager):
    with pytest.raises(ConfigError, match="Unknown template set"):
        manager.get_config(template_set="cobol")


def test_unknown_naming_option(manager):
    with pytest.raises(ConfigError, match="Unknown naming option"):
        manager.get_config({"naming": {"event": {"prefixAggregateName": True}}})


def test_unknown_naming_role(manager):
    with pytest.raises(ConfigError, match="Unknown naming role"):
        manager.get_config({"naming": {"query": {"extension": ".js"}}})


def test_unknown_template_role(manager):
    with pytest.raises(ConfigError, match="Unknown template role"):
        manager.get_config({"templates": {"saga": "saga.j2"}})


def test_invalid_prefix_type(manager):
    with pytest.raises(ConfigError, match="boolean"):
        manager.get_config({"naming": {"command": {"prefix_aggregate_name": "yes"}}})


def test_policy_requires_core_fields():
    with pytest.raises(ConfigError, match="missing"):
        NamingPolicy.from_dict({"extension": ".js"}, "event")


def test_validate_default_config_has_no_warnings(manager):
    assert manager.validate_config(manager.get_config()) == []


def test_validate_reports_problems(manager):
    config = manager.get_config(
        {
            "naming": {
                "event": {"suffix": "", "extension": "js"},
                "fault": {"folder": "events"},
                "command": {"folder": "aggregates"},
            }
        }
    )

    warnings = manager.validate_config(config)

    assert "Empty suffix for 'event'" in warnings
    assert any("does not start with a dot" in w for w in warnings)
    assert any("share the aggregate folder" in w for w in warnings)
    assert any("'fault' and 'event' share" in w for w in warnings)


def test_save_config_writes_json(manager, tmp_path):
    config = manager.get_config({"license": "MIT"})
    path = tmp_path / "saved.json"

    manager.save_config(config, path)
    saved = json.loads(path.read_text())

    assert saved["license"] == "MIT"
    assert saved["naming"]["event"]["suffix"] == "Event"
    assert manager.get_config(config_file=path) == config


def test_load_config_convenience():
    assert load_config(template_set="typescript").template_set == "typescript"


def test_validate_reports_index_clash(manager):
    config = manager.get_config({"naming": {"command": {"folder": ""}}})

    warnings = manager.validate_config(config)

    assert "'command' index 'index.js' clashes with the root index" in warnings
    assert "Empty output folder for 'command'" in warnings


def test_validate_reports_nested_root_index_clash(manager):
    config = manager.get_config({"root_module_name": "events/index.js"})

    warnings = manager.validate_config(config)

    assert warnings == ["'event' index 'events/index.js' clashes with the root index"]
