"""
Generation orchestrator.

Walks one parsed model, derives the class and file name of every
aggregate and sub-entity, emits one file per item, then one index file per
populated kind and a root index listing the kinds.
"""

import posixpath
from typing import Any, Dict, List, Optional

from .config import (
    AGGREGATE_ROLE,
    ROOT_MODULE_ROLE,
    SUB_MODULE_ROLE,
    TEMPLATE_ROLES,
    GeneratorConfig,
)
from .model import AggregateDef, EntityDef, EntityKind, Model
from .naming import NamingStrategy, naming_for
from .templates import TemplateEngine
from ..registry import CollectionEntry, CollectionRegistry
from ..sinks import GeneratedFile, OutputSink, join_path
from ...logging_config import get_logger

logger = get_logger(__name__)


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class NameCollisionError(GeneratorError):
    """Two generated files of one walk resolved to the same path."""

    def __init__(self, path: str, first: str, second: str):
        self.path = path
        self.first = first
        self.second = second
        super().__init__(f"{second} would overwrite {first} at '{path}'")


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self,
        files: List[GeneratedFile] = None,
        warnings: List[str] = None,
        metadata: Dict[str, Any] = None,
    ):
        """
        Initialize generation result.

        Args:
            files: Files emitted, in emission order
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
        """
        self.files = files or []
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.success = True
        self.error_message: Optional[str] = None
        self.exception: Optional[Exception] = None

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.files]

    @classmethod
    def error(
        cls,
        message: str,
        exception: Exception = None,
        files: List[GeneratedFile] = None,
    ) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls(files=files)
        result.success = False
        result.error_message = message
        result.exception = exception
        return result


def _relative_folder(start: str, target: str) -> str:
    """Path from one output folder to another, as used in relative imports."""
    relative = posixpath.relpath(target or ".", start or ".")
    if relative == "." or relative.startswith(".."):
        return relative
    return f"./{relative}"


class _Walk:
    """State scoped to a single model walk."""

    def __init__(self, sink: OutputSink):
        self.sink = sink
        self.registry = CollectionRegistry()
        self.files: List[GeneratedFile] = []
        self.owners: Dict[str, str] = {}

    def emit(
        self, path: str, content: str, owner: str, class_name: Optional[str] = None
    ):
        if path in self.owners:
            raise NameCollisionError(path, self.owners[path], owner)
        self.owners[path] = owner

        generated = GeneratedFile(path=path, content=content, class_name=class_name)
        self.sink.emit(generated)
        self.files.append(generated)
        logger.debug("Emitted %s", path)


class GenerationOrchestrator:
    """Generates every file of a domain model."""

    def __init__(self, config: GeneratorConfig, template_engine: TemplateEngine):
        """
        Initialize orchestrator.

        Args:
            config: Naming policies, template names and index file names
            template_engine: Engine able to render every configured template
        """
        self.config = config
        self.template_engine = template_engine
        self.aggregate_naming = naming_for(None, config.policy_for(None))
        self.entity_naming: Dict[EntityKind, NamingStrategy] = {
            kind: naming_for(kind, config.policy_for(kind)) for kind in EntityKind
        }
        self.kind_paths = {
            kind.value: _relative_folder(self.aggregate_naming.folder, naming.folder)
            for kind, naming in self.entity_naming.items()
        }

    def required_templates(self) -> List[str]:
        """Template names this orchestrator renders."""
        return [self.config.template_for(role) for role in TEMPLATE_ROLES]

    def generate(self, model: Model, sink: OutputSink) -> GenerationResult:
        """
        Generate all files for a model.

        Files are pushed to the sink as they are rendered; a failure part way
        through leaves the earlier emissions in place.

        Args:
            model: Parsed domain model, not yet decorated
            sink: Receiver of generated files

        Returns:
            GenerationResult listing the emitted files

        Raises:
            GeneratorError: On name collisions
            TemplateError: When a template fails to render
        """
        walk = _Walk(sink)
        logger.info(
            "Generating %d aggregate(s) with %d entities from %s",
            len(model.aggregates),
            model.entity_count(),
            model.source or "<model>",
        )

        self._assign_names(model)
        model_context = model.context()

        for aggregate in model.aggregates.values():
            self._generate_aggregate(model, aggregate, model_context, walk)

        populated = self._generate_sub_modules(walk)
        self._generate_root_module(populated, walk)

        metadata = {
            "source": model.source,
            "aggregates": len(model.aggregates),
            "files": len(walk.files),
            "kinds": {
                kind: len(walk.registry.items_for(EntityKind(kind))) for kind in populated
            },
        }
        logger.info("Generated %d file(s) from %s", len(walk.files), model.source or "<model>")
        return GenerationResult(files=walk.files, metadata=metadata)

    # Naming

    def _assign_names(self, model: Model):
        """Decorate every aggregate and entity before any template renders."""
        for aggregate in model.aggregates.values():
            aggregate.assign_names(
                self.aggregate_naming.published_name(aggregate.name),
                self.aggregate_naming.file_name(aggregate.name),
            )
            logger.debug(
                "Aggregate %s: class %s, file %s",
                aggregate.name,
                aggregate.class_name,
                aggregate.file_name,
            )

            for entity in aggregate.iter_entities():
                naming = self.entity_naming[entity.kind]
                entity.assign_names(
                    naming.published_name(entity.name, aggregate.name),
                    naming.file_name(entity.name, aggregate.name),
                )
                logger.debug(
                    "%s %s.%s: class %s, file %s",
                    entity.kind.value.title(),
                    aggregate.name,
                    entity.name,
                    entity.class_name,
                    entity.file_name,
                )

    # Emission

    def _generate_aggregate(
        self,
        model: Model,
        aggregate: AggregateDef,
        model_context: Dict[str, Any],
        walk: _Walk,
    ):
        aggregate_context = model.aggregate_context(aggregate, model_context)
        aggregate_context["kindPaths"] = dict(self.kind_paths)
        path = join_path(self.aggregate_naming.folder, aggregate.file_name)
        content = self.template_engine.render_template(
            self.config.template_for(AGGREGATE_ROLE), aggregate_context
        )
        walk.emit(
            path, content, f"aggregate '{aggregate.name}'", aggregate.class_name
        )

        for entity in aggregate.iter_entities():
            self._generate_entity(model, entity, aggregate_context, walk)

    def _generate_entity(
        self,
        model: Model,
        entity: EntityDef,
        aggregate_context: Dict[str, Any],
        walk: _Walk,
    ):
        naming = self.entity_naming[entity.kind]
        path = join_path(naming.folder, entity.file_name)
        content = self.template_engine.render_template(
            self.config.template_for(entity.kind.value),
            model.entity_context(entity, aggregate_context),
        )
        walk.emit(
            path,
            content,
            f"{entity.kind.value} '{entity.aggregate_name}.{entity.name}'",
            entity.class_name,
        )

        walk.registry.register(
            entity.kind,
            naming.folder,
            CollectionEntry(
                class_name=entity.class_name,
                file_name=entity.file_name,
                full_path=path,
            ),
        )

    def _generate_sub_modules(self, walk: _Walk) -> Dict[str, str]:
        """Emit one index per populated kind; returns kind -> folder."""
        populated: Dict[str, str] = {}
        template = self.config.template_for(SUB_MODULE_ROLE)
        logger.debug(
            "Writing indexes for %d entit(ies) in %d kind(s)",
            walk.registry.total_items(),
            len(walk.registry),
        )

        for collection in walk.registry.kinds():
            logger.debug(
                "Rendering index for %s (%d item(s))",
                collection.kind.value,
                len(collection.items),
            )
            content = self.template_engine.render_template(
                template, collection.to_context()
            )
            walk.emit(
                join_path(collection.folder, self.config.sub_module_name),
                content,
                f"{collection.kind.value} index",
            )
            populated[collection.kind.value] = collection.folder

        return populated

    def _generate_root_module(self, populated: Dict[str, str], walk: _Walk):
        if not populated and not self.config.emit_empty_root_index:
            logger.debug("No kinds populated, skipping root index")
            return

        context = {
            "items": [
                {"className": kind, "fileName": folder}
                for kind, folder in populated.items()
            ]
        }
        content = self.template_engine.render_template(
            self.config.template_for(ROOT_MODULE_ROLE), context
        )
        walk.emit(join_path(self.config.root_module_name), content, "root index")


def generate_code(
    orchestrator: GenerationOrchestrator, model: Model, sink: OutputSink
) -> GenerationResult:
    """
    Generate files for a model with error handling.

    Args:
        orchestrator: Configured orchestrator
        model: Parsed model
        sink: Receiver of generated files

    Returns:
        GenerationResult; failed results carry the exception
    """
    try:
        return orchestrator.generate(model, sink)
    except Exception as e:
        logger.error("Code generation failed for %s: %s", model.source or "<model>", e)
        return GenerationResult.error(f"Code generation failed: {e}", exception=e)
