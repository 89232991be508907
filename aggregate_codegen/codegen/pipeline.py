"""
Pipeline host for model documents.

Feeds a stream of model documents through the orchestrator one at a time.
A failing document is reported and skipped; it never stops the stream.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from .core.config import ConfigError, GeneratorConfig, load_config
from .core.generator import GenerationOrchestrator
from .core.model import parse_model
from .core.templates import TemplateEngine, TemplateError, create_template_engine
from .sinks import BufferedSink, GeneratedFile, OutputSink, RecordingSink
from ..logging_config import get_logger
from ..utils import parse_yaml_text

logger = get_logger(__name__)

STATUS_GENERATED = "generated"
STATUS_FAILED = "failed"
STATUS_SKIPPED = "skipped"


@dataclass(frozen=True)
class InputDocument:
    """A model document entering the pipeline."""

    source: str
    text: str


@dataclass
class ModelOutcome:
    """What happened to one input item."""

    source: Optional[str]
    status: str
    files: List[GeneratedFile] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.status != STATUS_FAILED


@dataclass
class PipelineReport:
    """Outcomes of a whole run."""

    outcomes: List[ModelOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[ModelOutcome]:
        return [o for o in self.outcomes if o.status == STATUS_GENERATED]

    @property
    def failed(self) -> List[ModelOutcome]:
        return [o for o in self.outcomes if o.status == STATUS_FAILED]

    @property
    def files_written(self) -> int:
        return sum(len(o.files) for o in self.outcomes)

    @property
    def ok(self) -> bool:
        return not self.failed


ErrorCallback = Callable[[Optional[str], Exception], None]


class GenerationPipeline:
    """Runs model documents through code generation."""

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        template_engine: Optional[TemplateEngine] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        """
        Initialize the pipeline and compile every template it needs.

        Args:
            config: Generation configuration (defaults to the es6 set)
            template_engine: Engine to use instead of the configured set
            on_error: Called with (source, exception) for each failed document

        Raises:
            ConfigError: If a required template cannot be loaded or compiled
        """
        self.config = config or load_config()
        self.on_error = on_error

        try:
            if template_engine is None:
                template_engine = create_template_engine(
                    template_set=self.config.template_set,
                    template_dir=self.config.template_dir,
                    encoding=self.config.template_encoding,
                )
            self.template_engine = template_engine
            self.orchestrator = GenerationOrchestrator(self.config, template_engine)
            required = self.orchestrator.required_templates()
            missing = [
                name
                for name in dict.fromkeys(required)
                if not template_engine.template_exists(name)
            ]
            if missing:
                raise TemplateError(f"Missing template(s): {', '.join(missing)}")
            compiled = template_engine.compile_all(required)
        except TemplateError as e:
            logger.error("Template setup failed: %s", e)
            raise ConfigError(str(e)) from e

        logger.debug("Compiled templates: %s", ", ".join(compiled))

    def process(self, document: Optional[InputDocument], sink: OutputSink) -> ModelOutcome:
        """
        Generate files for one document.

        Args:
            document: Model document, or None (passed through untouched)
            sink: Receiver of generated files

        Returns:
            Outcome of this document; errors are captured, not raised
        """
        if document is None:
            logger.debug("Empty pipeline item, passing through")
            return ModelOutcome(source=None, status=STATUS_SKIPPED)

        logger.info("Processing model: %s", document.source)
        recorder = RecordingSink(sink)
        target = BufferedSink(recorder) if self.config.atomic else recorder

        try:
            raw = parse_yaml_text(document.text, document.source)
            model = parse_model(raw, source=document.source)
            self.orchestrator.generate(model, target)
        except Exception as e:
            logger.error("Failed to generate %s: %s", document.source, e)
            logger.debug("Failure details", exc_info=True)
            if isinstance(target, BufferedSink):
                dropped = target.discard()
                logger.debug("Discarded %d buffered file(s)", dropped)
            if self.on_error is not None:
                self.on_error(document.source, e)
            # Best-effort runs keep what already reached the sink
            return ModelOutcome(
                source=document.source,
                status=STATUS_FAILED,
                files=list(recorder.files),
                error=e,
            )

        if isinstance(target, BufferedSink):
            target.flush()

        return ModelOutcome(
            source=document.source, status=STATUS_GENERATED, files=list(recorder.files)
        )

    def process_all(
        self, documents: Iterable[Optional[InputDocument]], sink: OutputSink
    ) -> PipelineReport:
        """Process a stream of documents, one at a time, to completion."""
        report = PipelineReport()
        for document in documents:
            report.outcomes.append(self.process(document, sink))

        logger.info(
            "Processed %d document(s): %d generated, %d failed, %d file(s)",
            len(report.outcomes),
            len(report.succeeded),
            len(report.failed),
            report.files_written,
        )
        return report
