"""
Tests for model parsing and template contexts
"""

import pytest

from aggregate_codegen.codegen.core.config import EXAMPLE_CONFIG, ConfigManager
from aggregate_codegen.codegen.core.model import EntityKind, ModelError, parse_model
from aggregate_codegen.utils import parse_yaml_text

SHOP_MODEL = """
service: shop
aggregates:
  order:
    owner: sales
    commands:
      placeOrder:
        properties: {total: number}
      cancelOrder:
    faults:
      orderNotFound: {}
  customer:
    events:
      customerRegistered: {}
"""


@pytest.fixture
def model():
    return parse_model(parse_yaml_text(SHOP_MODEL), source="shop.yaml")


def test_aggregates_keep_document_order(model):
    assert list(model.aggregates) == ["order", "customer"]
    assert model.source == "shop.yaml"
    assert model.extra == {"service": "shop"}


def test_aggregate_fields_exclude_collections(model):
    order = model.aggregate("order")

    assert order.fields == {"owner": "sales"}
    assert [e.name for e in order.entities_of(EntityKind.COMMAND)] == [
        "placeOrder",
        "cancelOrder",
    ]
    assert order.entities_of(EntityKind.EVENT) == []


def test_null_entity_body_is_empty(model):
    cancel = model.aggregate("order").entities[EntityKind.COMMAND]["cancelOrder"]

    assert cancel.fields == {}
    assert cancel.aggregate_name == "order"


def test_iter_entities_orders_kinds(model):
    kinds = [e.kind for e in model.aggregate("order").iter_entities()]

    assert kinds == [EntityKind.COMMAND, EntityKind.COMMAND, EntityKind.FAULT]


def test_entity_count(model):
    assert model.entity_count() == 4
    assert model.entity_count(EntityKind.COMMAND) == 2
    assert model.entity_count(EntityKind.EVENT) == 1


def test_owner_of(model):
    event = model.aggregate("customer").entities_of(EntityKind.EVENT)[0]

    assert model.owner_of(event) is model.aggregate("customer")


def test_unknown_aggregate(model):
    with pytest.raises(ModelError, match="Unknown aggregate"):
        model.aggregate("invoice")


def test_declared_empty_collections_are_kept():
    model = parse_model({"aggregates": {"audit": {"commands": {}, "events": None}}})
    audit = model.aggregate("audit")

    assert audit.entities == {EntityKind.COMMAND: {}, EntityKind.EVENT: {}}
    assert list(audit.iter_entities()) == []
    assert audit.summary()["commands"] == {}
    assert audit.summary()["events"] == {}
    assert "faults" not in audit.summary()


def test_non_string_keys_are_converted():
    model = parse_model({"aggregates": {1: {"events": {2: {}}}}})

    assert list(model.aggregates) == ["1"]
    assert model.aggregate("1").entities_of(EntityKind.EVENT)[0].name == "2"


@pytest.mark.parametrize(
    "document,message",
    [
        (None, "must be a mapping"),
        (["aggregates"], "must be a mapping"),
        ({"service": "shop"}, "no 'aggregates' section"),
        ({"aggregates": 3}, "'aggregates' must be a mapping"),
        ({"aggregates": {"order": "x"}}, "aggregate 'order' must be a mapping"),
        ({"aggregates": {"order": {"events": []}}}, "'order.events' must be a mapping"),
        (
            {"aggregates": {"order": {"faults": {"lost": 1}}}},
            "fault 'order.lost' must be a mapping",
        ),
    ],
)
def test_invalid_documents(document, message):
    with pytest.raises(ModelError, match=message):
        parse_model(document)


# =============================================================================
# Names and contexts
# =============================================================================


def test_names_are_assigned_once(model):
    order = model.aggregate("order")
    order.assign_names("OrderAggregate", "order-aggregate.js")

    with pytest.raises(ModelError, match="already named"):
        order.assign_names("OrderAggregate", "order-aggregate.js")


def test_entity_context_has_no_cycles(model):
    order = model.aggregate("order")
    order.assign_names("OrderAggregate", "order-aggregate.js")
    place = order.entities_of(EntityKind.COMMAND)[0]
    place.assign_names("PlaceOrderCommand", "place-order-command.js")

    context = model.entity_context(place)

    assert context["className"] == "PlaceOrderCommand"
    assert context["kind"] == "command"
    assert context["properties"] == {"total": "number"}
    assert context["aggregate"]["className"] == "OrderAggregate"
    assert context["aggregate"]["owner"] == "sales"
    assert context["aggregate"]["model"]["service"] == "shop"
    assert "aggregate" not in context["aggregate"]["commands"]["placeOrder"]
    assert set(context["aggregate"]["model"]["aggregates"]) == {"order", "customer"}


def test_aggregate_context_lists_entities_by_kind(model):
    context = model.aggregate_context(model.aggregate("order"))

    assert set(context["commands"]) == {"placeOrder", "cancelOrder"}
    assert set(context["faults"]) == {"orderNotFound"}
    assert "events" not in context


def test_example_config_is_valid():
    manager = ConfigManager()
    config = manager.get_config(EXAMPLE_CONFIG)

    assert config.policy_for(EntityKind.FAULT).folder == "errors"
    assert manager.validate_config(config) == []
