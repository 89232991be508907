"""
Tests for the template engine and the built-in template sets
"""

import pytest

from aggregate_codegen.codegen.core.config import load_config
from aggregate_codegen.codegen.core.generator import GenerationOrchestrator
from aggregate_codegen.codegen.core.model import parse_model
from aggregate_codegen.codegen.core.templates import (
    TemplateEngine,
    TemplateError,
    create_template_engine,
    list_builtin_template_sets,
)
from aggregate_codegen.codegen.sinks import MemorySink
from aggregate_codegen.utils import parse_yaml_text

from conftest import USER_ACCOUNT_MODEL

TEMPLATE_NAMES = ["aggregate.j2", "command.j2", "event.j2", "fault.j2", "module.j2"]


def test_builtin_template_sets():
    assert list_builtin_template_sets() == ["es6", "typescript"]


@pytest.mark.parametrize("template_set", ["es6", "typescript"])
def test_builtin_templates_compile(template_set):
    config = load_config(template_set=template_set)
    engine = create_template_engine(template_set=template_set)
    orchestrator = GenerationOrchestrator(config, engine)

    compiled = engine.compile_all(orchestrator.required_templates())

    assert set(compiled) <= set(TEMPLATE_NAMES) | {"index.j2"}


def test_es6_output():
    config = load_config()
    orchestrator = GenerationOrchestrator(config, create_template_engine("es6"))
    sink = MemorySink()

    orchestrator.generate(parse_model(parse_yaml_text(USER_ACCOUNT_MODEL)), sink)
    files = sink.by_path()

    assert "class UserAccountAggregate {" in files["aggregates/user-account-aggregate.js"]
    assert "createUser(command)" in files["aggregates/user-account-aggregate.js"]
    assert "module.exports = CreateUserCommand;" in files["commands/create-user-command.js"]
    assert (
        "module.exports.CreateUserCommand = require('./create-user-command');"
        in files["commands/index.js"]
    )
    assert "module.exports.command = require('./commands');" in files["index.js"]


def test_typescript_output():
    config = load_config(template_set="typescript")
    orchestrator = GenerationOrchestrator(config, create_template_engine("typescript"))
    sink = MemorySink()
    model = parse_model(
        parse_yaml_text(
            "aggregates:\n  order:\n    faults:\n      notFound:\n"
            "        message: Order not found\n        properties:\n          orderId: string\n"
        )
    )

    orchestrator.generate(model, sink)
    files = sink.by_path()

    fault = files["faults/not-found-fault.ts"]
    assert "export class NotFoundFault extends Error {" in fault
    assert "super('Order not found');" in fault
    assert "public readonly orderId: string;" in fault
    assert "export { NotFoundFault } from './not-found-fault';" in files["faults/index.ts"]
    assert "export * as fault from './faults';" in files["index.ts"]


def test_user_template_dir_overrides_builtin(tmp_path):
    (tmp_path / "event.j2").write_text("custom {{ className }}")

    engine = create_template_engine(template_set="es6", template_dir=tmp_path)

    assert engine.render_template("event.j2", {"className": "X"}) == "custom X"
    assert engine.template_exists("command.j2")


def test_missing_template_dir():
    with pytest.raises(TemplateError, match="not found"):
        create_template_engine(template_set="es6", template_dir="/nonexistent/templates")


def test_unknown_template_set():
    with pytest.raises(TemplateError, match="Unknown template set"):
        create_template_engine(template_set="cobol")


def test_missing_template_fails_to_compile():
    engine = TemplateEngine(templates={})

    with pytest.raises(TemplateError, match="not found"):
        engine.compile("aggregate.j2")


def test_syntax_error_fails_to_compile():
    engine = TemplateEngine(templates={"bad.j2": "{% for x in %}"})

    with pytest.raises(TemplateError, match="bad.j2"):
        engine.compile("bad.j2")


def test_in_memory_template_can_be_replaced():
    engine = TemplateEngine(templates={"a.j2": "one"})
    assert engine.render_template("a.j2", {}) == "one"

    engine.add_template("a.j2", "two")

    assert engine.render_template("a.j2", {}) == "two"


def test_filters():
    engine = TemplateEngine()

    rendered = engine.render_string(
        "{{ 'userCreated' | capitalize_first }} {{ 'UserCreated' | kebab_case }} "
        "{{ 'user-created.js' | strip_extension }} {{ 'commands' | strip_extension }}",
        {},
    )

    assert rendered == "UserCreated user-created user-created commands"


def test_comment_filter():
    engine = TemplateEngine()

    assert engine.render_string("{{ text | comment('#') }}", {"text": "a\n\nb"}) == "# a\n\n# b"


def test_typescript_imports_follow_configured_folders():
    config = load_config(
        {"naming": {"command": {"folder": "app/commands"}}}, template_set="typescript"
    )
    orchestrator = GenerationOrchestrator(config, create_template_engine("typescript"))
    sink = MemorySink()

    orchestrator.generate(parse_model(parse_yaml_text(USER_ACCOUNT_MODEL)), sink)
    aggregate = sink.by_path()["aggregates/user-account-aggregate.ts"]

    assert (
        "import { CreateUserCommand } from '../app/commands/create-user-command';"
        in aggregate
    )
    assert "import { UserCreatedEvent } from '../events/user-created-event';" in aggregate


def test_template_exists_does_not_compile():
    engine = TemplateEngine(templates={"bad.j2": "{% for x in %}"})

    assert engine.template_exists("bad.j2")
    assert not engine.template_exists("missing.j2")
