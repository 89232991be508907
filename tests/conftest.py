"""
Pytest configuration and shared fixtures

Templates are kept in memory and render a compact, predictable text so
tests can assert on exact output.
"""

import pytest

from aggregate_codegen.codegen.core.config import NAMING_ROLES, load_config
from aggregate_codegen.codegen.core.generator import GenerationOrchestrator
from aggregate_codegen.codegen.core.templates import TemplateEngine
from aggregate_codegen.codegen.pipeline import GenerationPipeline
from aggregate_codegen.codegen.sinks import MemorySink

MEMORY_TEMPLATES = {
    "aggregate.j2": (
        "{{ className }}"
        "{% for name, command in (commands or {}).items() %} {{ command.className }}{% endfor %}"
    ),
    "command.j2": "{{ className }}@{{ aggregate.className }}",
    "event.j2": "{{ className }}@{{ aggregate.className }}",
    "fault.j2": "{{ className }}@{{ aggregate.className }}",
    "module.j2": "{% for item in items %}{{ item.className }}={{ item.fileName }};{% endfor %}",
}

USER_ACCOUNT_MODEL = """
aggregates:
  userAccount:
    commands:
      createUser: {}
    events:
      userCreated: {}
"""


def make_config(**overrides):
    """Configuration using the '.ext' extension for every kind."""
    custom = {
        "naming": {role: {"extension": ".ext"} for role in NAMING_ROLES},
        "sub_module_name": "index.ext",
        "root_module_name": "index.ext",
    }
    naming = overrides.pop("naming", {})
    for role, policy in naming.items():
        custom["naming"][role].update(policy)
    custom.update(overrides)
    return load_config(custom_config=custom)


@pytest.fixture
def config():
    """Default configuration with '.ext' files"""
    return make_config()


@pytest.fixture
def engine():
    """Template engine backed by in-memory templates"""
    return TemplateEngine(templates=MEMORY_TEMPLATES)


@pytest.fixture
def orchestrator(config, engine):
    """Orchestrator wired to the in-memory templates"""
    return GenerationOrchestrator(config, engine)


@pytest.fixture
def sink():
    """Fresh in-memory sink for each test"""
    return MemorySink()


@pytest.fixture
def pipeline(config, engine):
    """Pipeline wired to the in-memory templates"""
    return GenerationPipeline(config, template_engine=engine)
