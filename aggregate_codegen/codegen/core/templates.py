"""
Template engine wrapper for code generation.

Provides a simple interface for Jinja2 template rendering
with naming filters shared with the generator.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from jinja2 import (
    BaseLoader,
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    Template,
    TemplateNotFound,
    TemplateSyntaxError,
    select_autoescape,
)

from .naming import capitalize_first_letter, split_on_capital_boundaries
from ...logging_config import get_logger

logger = get_logger(__name__)

BUILTIN_TEMPLATE_ROOT = Path(__file__).resolve().parent.parent / "templates"


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


class TemplateEngine:
    """Wrapper for Jinja2 template engine with code generation utilities."""

    def __init__(
        self,
        template_dirs: Optional[Iterable[Union[str, Path]]] = None,
        templates: Optional[Dict[str, str]] = None,
        encoding: str = "utf-8",
    ):
        """
        Initialize template engine.

        Args:
            template_dirs: Directories searched for template files, in order
            templates: In-memory templates, searched before the directories
            encoding: Encoding of template files
        """
        self.template_dirs = [Path(d) for d in (template_dirs or [])]
        self.encoding = encoding
        self._memory = DictLoader(dict(templates or {}))
        self._compiled: Dict[str, Template] = {}
        self._env = None
        self._setup_environment()

    def _setup_environment(self):
        """Setup Jinja2 environment with code generation utilities."""
        loaders: List[BaseLoader] = [self._memory]
        for template_dir in self.template_dirs:
            if template_dir.is_dir():
                loaders.append(
                    FileSystemLoader(str(template_dir), encoding=self.encoding)
                )
            else:
                logger.warning("Template directory not found: %s", template_dir)

        self._env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        # Add custom filters for code generation
        self._env.filters["capitalize_first"] = capitalize_first_letter
        self._env.filters["kebab_case"] = self._kebab_case_filter
        self._env.filters["strip_extension"] = self._strip_extension_filter
        self._env.filters["comment"] = self._comment_filter

    def add_template(self, name: str, content: str):
        """
        Add an in-memory template.

        Args:
            name: Template name
            content: Template content
        """
        self._memory.mapping[name] = content
        self._compiled.pop(name, None)

    def template_exists(self, template_name: str) -> bool:
        """Check if a template source can be found, without compiling it."""
        try:
            self._env.loader.get_source(self._env, template_name)
            return True
        except TemplateNotFound:
            return False

    def compile(self, template_name: str) -> Template:
        """
        Load and compile a template, caching the result.

        Raises:
            TemplateError: If the template is missing or invalid
        """
        if template_name in self._compiled:
            return self._compiled[template_name]

        logger.debug("Loading template %s", template_name)
        try:
            template = self._env.get_template(template_name)
        except TemplateNotFound as e:
            raise TemplateError(f"Error loading template {template_name}: not found") from e
        except TemplateSyntaxError as e:
            raise TemplateError(
                f"Error loading template {template_name}: {e.message} (line {e.lineno})"
            ) from e

        self._compiled[template_name] = template
        logger.debug("Compiled template %s", template_name)
        return template

    def compile_all(self, template_names: Iterable[str]) -> List[str]:
        """Compile every named template up front; returns the names compiled."""
        names = []
        for name in template_names:
            if name not in names:
                self.compile(name)
                names.append(name)
        return names

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of template file
            context: Variables to pass to template

        Returns:
            Rendered template content
        """
        template = self.compile(template_name)
        try:
            return template.render(**context)
        except Exception as e:
            raise TemplateError(f"Failed to render template {template_name}: {e}") from e

    def render_string(self, template_string: str, context: Dict[str, Any]) -> str:
        """
        Render a template string with the given context.

        Args:
            template_string: Template content as string
            context: Variables to pass to template

        Returns:
            Rendered content
        """
        try:
            template = self._env.from_string(template_string)
            return template.render(**context)
        except Exception as e:
            raise TemplateError(f"Failed to render template string: {e}") from e

    # Template filters for code generation

    def _kebab_case_filter(self, value: str) -> str:
        """Convert CapitalCase to kebab-case."""
        return split_on_capital_boundaries(str(value), "-")

    def _strip_extension_filter(self, value: str) -> str:
        """Drop the last extension from a file name."""
        name = str(value)
        stem, dot, _ = name.rpartition(".")
        return stem if dot and stem else name

    def _comment_filter(self, value: str, style: str = "//") -> str:
        """Add comment markers to each line."""
        lines = str(value).split("\n")
        return "\n".join(f"{style} {line}" if line.strip() else line for line in lines)


def list_builtin_template_sets() -> List[str]:
    """Names of the template sets shipped with the package."""
    if not BUILTIN_TEMPLATE_ROOT.is_dir():
        return []
    return sorted(p.name for p in BUILTIN_TEMPLATE_ROOT.iterdir() if p.is_dir())


def create_template_engine(
    template_set: Optional[str] = None,
    template_dir: Optional[Union[str, Path]] = None,
    templates: Optional[Dict[str, str]] = None,
    encoding: str = "utf-8",
) -> TemplateEngine:
    """
    Create a template engine for a template set.

    A user template directory is searched before the built-in set, so
    individual templates can be overridden.

    Args:
        template_set: Built-in template set name
        template_dir: User template directory
        templates: In-memory templates
        encoding: Encoding of template files

    Returns:
        Configured TemplateEngine
    """
    dirs: List[Path] = []
    if template_dir:
        path = Path(template_dir)
        if not path.is_dir():
            raise TemplateError(f"Template directory not found: {path}")
        dirs.append(path)
    if template_set:
        builtin = BUILTIN_TEMPLATE_ROOT / template_set
        if builtin.is_dir():
            dirs.append(builtin)
        elif not template_dir and not templates:
            raise TemplateError(
                f"Unknown template set: {template_set}. "
                f"Available: {', '.join(list_builtin_template_sets())}"
            )

    return TemplateEngine(dirs, templates, encoding)
