from __future__ import annotations

from typing import Iterable

from rich.console import Console
from rich.table import Table
from rich import box

from .codegen.pipeline import (
    STATUS_FAILED,
    STATUS_GENERATED,
    GenerationPipeline,
    InputDocument,
    ModelOutcome,
    PipelineReport,
)
from .codegen.sinks import DirectorySink, OutputSink
from .logging_config import get_logger

logger = get_logger(__name__)


class CLIHandler:
    """Run generation for command-line inputs and report the results."""

    def __init__(self, console: Console | None = None, verbose: bool = False) -> None:
        """Initialize CLI handler.

        Args:
            console: Console to print to.
            verbose: Show every generated file, not just totals.
        """
        self.console = console or Console()
        self.verbose = verbose
        self.input_errors: list[tuple[str, Exception]] = []
        logger.debug("CLIHandler initialized")

    def report_input_error(self, source: str, error: Exception) -> None:
        """Record an input that could not be read."""
        self.input_errors.append((source, error))
        self.console.print(f"❌ [red]Cannot read {source}:[/red] {error}")
        logger.error("Cannot read %s: %s", source, error)

    def run(
        self,
        pipeline: GenerationPipeline,
        documents: Iterable[InputDocument],
        sink: OutputSink,
        dry_run: bool = False,
    ) -> int:
        """Generate every document and print a summary.

        Args:
            pipeline: Configured generation pipeline.
            documents: Model documents to process.
            sink: Receiver of generated files.
            dry_run: Files are only collected, not written.

        Returns:
            Exit code (0 when every input succeeded, 1 otherwise).
        """
        report = PipelineReport()
        for document in documents:
            self.console.print(f"📄 Loaded: {document.source}")
            outcome = pipeline.process(document, sink)
            report.outcomes.append(outcome)
            self._print_outcome(outcome)

        if not report.outcomes and not self.input_errors:
            self.console.print("❌ [red]No models found[/red]")
            logger.warning("No input documents; nothing generated")
            return 1

        if dry_run or self.verbose:
            self._print_files(report)

        self._print_summary(report, sink, dry_run)
        return 0 if report.ok and not self.input_errors else 1

    def _print_outcome(self, outcome: ModelOutcome) -> None:
        if outcome.status == STATUS_GENERATED:
            self.console.print(
                f"✅ [green]{outcome.source}:[/green] {len(outcome.files)} file(s)"
            )
        elif outcome.status == STATUS_FAILED:
            self.console.print(f"❌ [red]{outcome.source}:[/red] {outcome.error}")

    def _print_files(self, report: PipelineReport) -> None:
        table = Table(
            title="📂 Generated Files",
            box=box.SIMPLE,
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Model", style="dim")
        table.add_column("Path", style="bold")
        table.add_column("Class", style="cyan")
        table.add_column("Size", style="green", justify="right")

        for outcome in report.succeeded:
            for generated in outcome.files:
                table.add_row(
                    str(outcome.source),
                    generated.path,
                    generated.class_name or "",
                    f"{len(generated.content)} B",
                )

        self.console.print()
        self.console.print(table)

    def _print_summary(
        self, report: PipelineReport, sink: OutputSink, dry_run: bool
    ) -> None:
        failed = len(report.failed) + len(self.input_errors)
        if dry_run:
            where = "(dry run, nothing written)"
        elif isinstance(sink, DirectorySink):
            where = f"to [cyan]{sink.root}[/cyan]"
        else:
            where = ""

        self.console.print(
            f"\n📊 {len(report.succeeded)} model(s) generated, {failed} failed, "
            f"{report.files_written} file(s) {where}".rstrip()
        )
        logger.info(
            "Run finished: %d generated, %d failed", len(report.succeeded), failed
        )
