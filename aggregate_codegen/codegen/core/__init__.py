"""
Core code generation components.

Provides the naming rules, model representation, configuration,
template engine and orchestrator used by the generator.
"""

from .generator import (
    GenerationOrchestrator,
    GeneratorError,
    GenerationResult,
    NameCollisionError,
    generate_code,
)
from .model import AggregateDef, EntityDef, EntityKind, Model, ModelError, parse_model
from .naming import (
    AggregateNaming,
    CommandNaming,
    EventNaming,
    FaultNaming,
    NamingStrategy,
    capitalize_first_letter,
    ensure_suffix,
    format_file_name,
    format_published_name,
    naming_for,
    split_on_capital_boundaries,
)
from .config import (
    GeneratorConfig,
    NamingPolicy,
    ConfigManager,
    ConfigError,
    load_config,
)
from .templates import TemplateEngine, TemplateError, create_template_engine

__all__ = [
    # Orchestration
    "GenerationOrchestrator",
    "GeneratorError",
    "GenerationResult",
    "NameCollisionError",
    "generate_code",
    # Model
    "AggregateDef",
    "EntityDef",
    "EntityKind",
    "Model",
    "ModelError",
    "parse_model",
    # Naming
    "AggregateNaming",
    "CommandNaming",
    "EventNaming",
    "FaultNaming",
    "NamingStrategy",
    "capitalize_first_letter",
    "ensure_suffix",
    "format_file_name",
    "format_published_name",
    "naming_for",
    "split_on_capital_boundaries",
    # Configuration system
    "GeneratorConfig",
    "NamingPolicy",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
]
