"""
Aggregate Code Generation Module

Generates source files for aggregates, commands, events and faults
from a YAML domain model.
"""

from .core.generator import (
    GenerationOrchestrator,
    GenerationResult,
    GeneratorError,
    NameCollisionError,
    generate_code,
)
from .core.model import EntityKind, Model, ModelError, parse_model
from .core.config import ConfigError, GeneratorConfig, NamingPolicy, load_config
from .core.templates import TemplateError, create_template_engine
from .registry import CollectionEntry, CollectionRegistry, RegistryError
from .sinks import BufferedSink, DirectorySink, GeneratedFile, MemorySink, OutputSink
from .pipeline import GenerationPipeline, InputDocument, ModelOutcome, PipelineReport
from ..utils import parse_yaml_text


def generate_from_text(text, config=None, source="<text>"):
    """
    Generate files from YAML text into memory.

    Args:
        text: YAML model document
        config: GeneratorConfig, or dict of overrides
        source: Description of the document

    Returns:
        List of GeneratedFile
    """
    if not isinstance(config, GeneratorConfig):
        config = load_config(custom_config=config)

    engine = create_template_engine(
        template_set=config.template_set,
        template_dir=config.template_dir,
        encoding=config.template_encoding,
    )
    orchestrator = GenerationOrchestrator(config, engine)
    model = parse_model(parse_yaml_text(text, source), source=source)

    sink = MemorySink()
    orchestrator.generate(model, sink)
    return sink.files


__all__ = [
    "GenerationOrchestrator",
    "GenerationResult",
    "GeneratorError",
    "NameCollisionError",
    "generate_code",
    "EntityKind",
    "Model",
    "ModelError",
    "parse_model",
    "ConfigError",
    "GeneratorConfig",
    "NamingPolicy",
    "load_config",
    "TemplateError",
    "create_template_engine",
    "CollectionEntry",
    "CollectionRegistry",
    "RegistryError",
    "BufferedSink",
    "DirectorySink",
    "GeneratedFile",
    "MemorySink",
    "OutputSink",
    "GenerationPipeline",
    "InputDocument",
    "ModelOutcome",
    "PipelineReport",
    "generate_from_text",
]
