"""
Domain model representation for code generation.

Converts the deserialized YAML document into aggregates and their
sub-entities, and builds the template contexts handed to the renderer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional


class ModelError(Exception):
    """Exception raised for malformed domain models."""

    pass


class EntityKind(Enum):
    """Sub-entity kinds an aggregate can own."""

    COMMAND = "command"
    EVENT = "event"
    FAULT = "fault"

    @property
    def collection(self) -> str:
        """Key of this kind's collection inside an aggregate."""
        return f"{self.value}s"


@dataclass
class EntityDef:
    """A command, event or fault declared on an aggregate."""

    kind: EntityKind
    name: str
    aggregate_name: str  # key of the owning aggregate in the model
    fields: Dict[str, Any] = field(default_factory=dict)
    class_name: Optional[str] = None
    file_name: Optional[str] = None

    @property
    def is_named(self) -> bool:
        return self.class_name is not None

    def assign_names(self, class_name: str, file_name: str):
        """Decorate the entity with its derived names, exactly once."""
        if self.is_named:
            raise ModelError(
                f"{self.kind.value} '{self.aggregate_name}.{self.name}' is already named"
            )
        self.class_name = class_name
        self.file_name = file_name

    def summary(self) -> Dict[str, Any]:
        """Template data for this entity; raw fields win over its key and kind."""
        return {
            "name": self.name,
            "kind": self.kind.value,
            **self.fields,
            "className": self.class_name,
            "fileName": self.file_name,
        }


@dataclass
class AggregateDef:
    """An aggregate and the sub-entities it owns."""

    name: str
    fields: Dict[str, Any] = field(default_factory=dict)
    entities: Dict[EntityKind, Dict[str, EntityDef]] = field(default_factory=dict)
    class_name: Optional[str] = None
    file_name: Optional[str] = None

    @property
    def is_named(self) -> bool:
        return self.class_name is not None

    def assign_names(self, class_name: str, file_name: str):
        """Decorate the aggregate with its derived names, exactly once."""
        if self.is_named:
            raise ModelError(f"aggregate '{self.name}' is already named")
        self.class_name = class_name
        self.file_name = file_name

    def entities_of(self, kind: EntityKind) -> List[EntityDef]:
        """Entities of one kind, in declaration order."""
        return list(self.entities.get(kind, {}).values())

    def iter_entities(self) -> Iterator[EntityDef]:
        """All entities, kinds in command/event/fault order."""
        for kind in EntityKind:
            yield from self.entities_of(kind)

    def summary(self) -> Dict[str, Any]:
        """Template data for this aggregate; a raw `name` field wins over its key."""
        data = {
            "name": self.name,
            **self.fields,
            "className": self.class_name,
            "fileName": self.file_name,
        }
        for kind, entities in self.entities.items():
            data[kind.collection] = {
                name: entity.summary() for name, entity in entities.items()
            }
        return data


@dataclass
class Model:
    """A parsed domain model: aggregates in document order."""

    aggregates: Dict[str, AggregateDef] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)
    source: Optional[str] = None

    def aggregate(self, name: str) -> AggregateDef:
        """Resolve an aggregate by key."""
        try:
            return self.aggregates[name]
        except KeyError:
            raise ModelError(f"Unknown aggregate: {name}") from None

    def owner_of(self, entity: EntityDef) -> AggregateDef:
        return self.aggregate(entity.aggregate_name)

    def entity_count(self, kind: Optional[EntityKind] = None) -> int:
        kinds = [kind] if kind is not None else list(EntityKind)
        return sum(
            len(aggregate.entities_of(k))
            for aggregate in self.aggregates.values()
            for k in kinds
        )

    # Template contexts

    def context(self) -> Dict[str, Any]:
        """Template data describing the whole model."""
        return {
            **self.extra,
            "aggregates": {
                name: aggregate.summary() for name, aggregate in self.aggregates.items()
            },
        }

    def aggregate_context(
        self, aggregate: AggregateDef, model_context: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Context for the aggregate template."""
        context = aggregate.summary()
        context["model"] = model_context if model_context is not None else self.context()
        return context

    def entity_context(
        self, entity: EntityDef, aggregate_context: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Context for a sub-entity template."""
        context = entity.summary()
        if aggregate_context is None:
            aggregate_context = self.aggregate_context(self.owner_of(entity))
        context["aggregate"] = aggregate_context
        return context


def _as_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ModelError(f"{what} must be a mapping, got {type(value).__name__}")
    return value


def parse_model(document: Any, source: Optional[str] = None) -> Model:
    """
    Build a Model from a deserialized YAML document.

    Args:
        document: Output of the YAML loader
        source: Description of where the document came from

    Returns:
        Model with undecorated aggregates and entities

    Raises:
        ModelError: If the document is not a model
    """
    if not isinstance(document, Mapping):
        raise ModelError("Model document must be a mapping")

    if "aggregates" not in document:
        raise ModelError("Model document has no 'aggregates' section")

    raw_aggregates = _as_mapping(document["aggregates"], "'aggregates'")
    collection_keys = {kind.collection for kind in EntityKind}

    model = Model(
        extra={key: value for key, value in document.items() if key != "aggregates"},
        source=source,
    )

    for aggregate_name, raw_aggregate in raw_aggregates.items():
        aggregate_name = str(aggregate_name)
        raw_aggregate = _as_mapping(raw_aggregate, f"aggregate '{aggregate_name}'")

        aggregate = AggregateDef(
            name=aggregate_name,
            fields={
                key: value
                for key, value in raw_aggregate.items()
                if key not in collection_keys
            },
        )

        for kind in EntityKind:
            if kind.collection not in raw_aggregate:
                continue
            raw_entities = _as_mapping(
                raw_aggregate[kind.collection],
                f"'{aggregate_name}.{kind.collection}'",
            )
            entities = {}
            for entity_name, raw_entity in raw_entities.items():
                entity_name = str(entity_name)
                raw_entity = _as_mapping(
                    raw_entity, f"{kind.value} '{aggregate_name}.{entity_name}'"
                )
                entities[entity_name] = EntityDef(
                    kind=kind,
                    name=entity_name,
                    aggregate_name=aggregate_name,
                    fields=dict(raw_entity),
                )
            aggregate.entities[kind] = entities

        model.aggregates[aggregate_name] = aggregate

    return model
