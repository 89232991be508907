"""
Configuration management for code generation.

Handles loading and merging configuration from JSON or YAML files,
providing per-template-set defaults and validation for naming policies.
"""

import copy
import json
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .model import EntityKind
from ..sinks import join_path
from ...logging_config import get_logger

logger = get_logger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


AGGREGATE_ROLE = "aggregate"
SUB_MODULE_ROLE = "sub_module"
ROOT_MODULE_ROLE = "root_module"

NAMING_ROLES = (AGGREGATE_ROLE,) + tuple(kind.value for kind in EntityKind)
TEMPLATE_ROLES = NAMING_ROLES + (SUB_MODULE_ROLE, ROOT_MODULE_ROLE)

DEFAULT_TEMPLATE_SET = "es6"


@dataclass(frozen=True)
class NamingPolicy:
    """Naming rules for one kind of generated file."""

    extension: str
    folder: str
    suffix: str
    prefix_aggregate_name: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any], role: str = "") -> "NamingPolicy":
        """Build a policy from a configuration mapping."""
        if not isinstance(data, dict):
            raise ConfigError(f"Naming policy for '{role}' must be a mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(
                f"Unknown naming option(s) for '{role}': {', '.join(unknown)}"
            )

        missing = sorted(
            name for name in ("extension", "folder", "suffix") if name not in data
        )
        if missing:
            raise ConfigError(
                f"Naming policy for '{role}' is missing: {', '.join(missing)}"
            )

        for name in ("extension", "folder", "suffix"):
            if not isinstance(data[name], str):
                raise ConfigError(f"Naming option '{role}.{name}' must be a string")

        prefix = data.get("prefix_aggregate_name", False)
        if not isinstance(prefix, bool):
            raise ConfigError(
                f"Naming option '{role}.prefix_aggregate_name' must be a boolean"
            )

        return cls(
            extension=data["extension"],
            folder=data["folder"],
            suffix=data["suffix"],
            prefix_aggregate_name=prefix,
        )


def _naming_defaults(extension: str) -> Dict[str, Dict[str, Any]]:
    return {
        AGGREGATE_ROLE: {
            "extension": extension,
            "folder": "aggregates",
            "suffix": "Aggregate",
        },
        "command": {
            "extension": extension,
            "folder": "commands",
            "suffix": "Command",
            "prefix_aggregate_name": False,
        },
        "event": {
            "extension": extension,
            "folder": "events",
            "suffix": "Event",
            "prefix_aggregate_name": False,
        },
        "fault": {
            "extension": extension,
            "folder": "faults",
            "suffix": "Fault",
            "prefix_aggregate_name": False,
        },
    }


def _template_defaults() -> Dict[str, str]:
    return {
        AGGREGATE_ROLE: "aggregate.j2",
        "command": "command.j2",
        "event": "event.j2",
        "fault": "fault.j2",
        SUB_MODULE_ROLE: "module.j2",
        ROOT_MODULE_ROLE: "module.j2",
    }


@dataclass
class GeneratorConfig:
    """Complete configuration for one generation run."""

    # Template settings
    template_set: str = DEFAULT_TEMPLATE_SET
    template_dir: Optional[str] = None
    template_encoding: str = "utf-8"
    templates: Dict[str, str] = field(default_factory=_template_defaults)

    # Naming settings
    naming: Dict[str, NamingPolicy] = field(
        default_factory=lambda: {
            role: NamingPolicy.from_dict(data, role)
            for role, data in _naming_defaults(".js").items()
        }
    )
    sub_module_name: str = "index.js"
    root_module_name: str = "index.js"

    # Emission behaviour
    emit_empty_root_index: bool = True
    atomic: bool = False

    # Custom settings (passed to templates as ``config``)
    custom: Dict[str, Any] = field(default_factory=dict)

    def policy_for(self, kind: Optional[EntityKind]) -> NamingPolicy:
        """Naming policy for a sub-entity kind, or for aggregates when None."""
        role = AGGREGATE_ROLE if kind is None else kind.value
        try:
            return self.naming[role]
        except KeyError:
            raise ConfigError(f"No naming policy configured for '{role}'") from None

    def template_for(self, role: str) -> str:
        try:
            return self.templates[role]
        except KeyError:
            raise ConfigError(f"No template configured for '{role}'") from None

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data view, suitable for saving."""
        data = asdict(self)
        data.update(data.pop("custom"))
        return data


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._configs: Dict[str, Dict[str, Any]] = {}
        self._load_defaults()

    def _load_defaults(self):
        """Load default configurations for the built-in template sets."""
        # ES6 classes, one module per file
        self._configs["es6"] = {
            "template_set": "es6",
            "naming": _naming_defaults(".js"),
            "sub_module_name": "index.js",
            "root_module_name": "index.js",
        }

        # TypeScript classes
        self._configs["typescript"] = {
            "template_set": "typescript",
            "naming": _naming_defaults(".ts"),
            "sub_module_name": "index.ts",
            "root_module_name": "index.ts",
            "templates": {SUB_MODULE_ROLE: "index.j2"},
        }

    def get_config(
        self,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
        template_set: Optional[str] = None,
    ) -> GeneratorConfig:
        """
        Get complete configuration.

        Args:
            custom_config: Custom configuration overrides
            config_file: Path to JSON or YAML configuration file
            template_set: Template set used when neither source names one

        Returns:
            Merged configuration
        """
        file_config = self._load_config_file(config_file) if config_file else {}
        custom_config = custom_config or {}

        set_name = (
            custom_config.get("template_set")
            or file_config.get("template_set")
            or template_set
            or DEFAULT_TEMPLATE_SET
        )
        if set_name not in self._configs:
            raise ConfigError(
                f"Unknown template set: {set_name}. "
                f"Available: {', '.join(self.list_template_sets())}"
            )

        # Start with defaults, then file, then explicit overrides
        merged = copy.deepcopy(self._configs[set_name])
        _deep_merge(merged, file_config)
        _deep_merge(merged, custom_config)
        merged["template_set"] = set_name

        logger.debug("Resolved configuration for template set %s", set_name)
        return self._dict_to_config(merged)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from a JSON or YAML file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        suffix = path.suffix.lower()
        if suffix not in (".json", ".yaml", ".yml"):
            raise ConfigError(f"Configuration file must be JSON or YAML: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                if suffix == ".json":
                    config = json.load(f)
                else:
                    config = yaml.safe_load(f) or {}
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a mapping: {path}")

        logger.info("Loaded configuration file %s", path)
        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        known_fields = {f.name for f in fields(GeneratorConfig)}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        naming = config_args.get("naming", {})
        if not isinstance(naming, dict):
            raise ConfigError("'naming' must be a mapping")
        unknown_roles = sorted(set(naming) - set(NAMING_ROLES))
        if unknown_roles:
            raise ConfigError(f"Unknown naming role(s): {', '.join(unknown_roles)}")
        config_args["naming"] = {
            role: NamingPolicy.from_dict(data, role) for role, data in naming.items()
        }

        templates = _template_defaults()
        templates.update(config_args.get("templates") or {})
        unknown_templates = sorted(set(templates) - set(TEMPLATE_ROLES))
        if unknown_templates:
            raise ConfigError(
                f"Unknown template role(s): {', '.join(unknown_templates)}"
            )
        config_args["templates"] = templates

        # Add custom fields to the custom dict
        if custom_args:
            existing_custom = dict(config_args.get("custom") or {})
            existing_custom.update(custom_args)
            config_args["custom"] = existing_custom

        return GeneratorConfig(**config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(config.to_dict(), f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e

    def list_template_sets(self) -> List[str]:
        """Get list of built-in template sets."""
        return sorted(self._configs.keys())

    def validate_config(self, config: GeneratorConfig) -> List[str]:
        """
        Validate a configuration.

        Returns:
            List of validation warnings
        """
        warnings = []

        for role in NAMING_ROLES:
            if role not in config.naming:
                warnings.append(f"No naming policy for '{role}'")

        for role, policy in config.naming.items():
            if not policy.suffix:
                warnings.append(f"Empty suffix for '{role}'")
            if policy.extension and not policy.extension.startswith("."):
                warnings.append(
                    f"Extension for '{role}' does not start with a dot: {policy.extension}"
                )
            if not policy.folder:
                warnings.append(f"Empty output folder for '{role}'")

        aggregate_policy = config.naming.get(AGGREGATE_ROLE)
        if aggregate_policy:
            for kind in EntityKind:
                policy = config.naming.get(kind.value)
                if policy and policy.folder == aggregate_policy.folder:
                    warnings.append(
                        f"'{kind.value}' files share the aggregate folder "
                        f"'{policy.folder}' and its index file"
                    )

        folders = {}
        for kind in EntityKind:
            policy = config.naming.get(kind.value)
            if policy is None:
                continue
            if policy.folder in folders:
                warnings.append(
                    f"'{kind.value}' and '{folders[policy.folder]}' share the folder "
                    f"'{policy.folder}'"
                )
            else:
                folders[policy.folder] = kind.value

        root_index = join_path(config.root_module_name)
        for kind in EntityKind:
            policy = config.naming.get(kind.value)
            if policy is None:
                continue
            index = join_path(policy.folder, config.sub_module_name)
            if index == root_index:
                warnings.append(
                    f"'{kind.value}' index '{index}' clashes with the root index"
                )

        return warnings


def _deep_merge(target: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Merge nested mappings from overrides into target, in place."""
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)
    return target


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
    template_set: Optional[str] = None,
) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        custom_config: Custom configuration overrides
        config_file: Path to JSON or YAML configuration file
        template_set: Template set used when neither source names one

    Returns:
        Merged configuration
    """
    manager = get_config_manager()
    return manager.get_config(custom_config, config_file, template_set)


# Example configuration for reference
EXAMPLE_CONFIG = {
    "template_set": "typescript",
    "naming": {
        "event": {"prefix_aggregate_name": True},
        "fault": {"folder": "errors", "suffix": "Error"},
    },
    "emit_empty_root_index": False,
}
