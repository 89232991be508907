"""
Naming utilities for generated classes and files.

Derives the published (class-facing, CapitalCase) name and the file
(lowercase, hyphenated, extension-suffixed) name of every aggregate and
sub-entity from its raw key in the domain model.
"""

from abc import ABC
from typing import Dict, Optional, Type

from .config import NamingPolicy
from .model import EntityKind

FILE_NAME_DIVIDER = "-"


def capitalize_first_letter(value: str) -> str:
    """Uppercase the first character, leaving the rest untouched."""
    return value[:1].upper() + value[1:]


def split_on_capital_boundaries(value: str, divider: str) -> str:
    """
    Split a string before every uppercase character and rejoin it lowercased.

    The first character never starts a new segment, so
    ``"UserCreated"`` becomes ``"user-created"`` and ``"ABCEvent"`` becomes
    ``"a-b-c-event"`` with a ``"-"`` divider.

    Args:
        value: String to split
        divider: Text placed between segments

    Returns:
        Lowercased segments joined by the divider
    """
    segments = []
    current = ""

    for index, char in enumerate(value):
        if index > 0 and char.isupper():
            segments.append(current)
            current = ""
        current += char

    segments.append(current)
    return divider.join(segment.lower() for segment in segments)


def ensure_suffix(value: str, suffix: str) -> str:
    """
    Capitalize a name and append a suffix unless it already ends with it.

    The check ignores case but the suffix is appended verbatim, so
    ``"userLoggedInEvent"`` with ``"Event"`` stays ``"UserLoggedInEvent"``.
    """
    formatted = capitalize_first_letter(value)
    if not formatted.lower().endswith(suffix.lower()):
        formatted = formatted + suffix
    return formatted


def format_published_name(
    raw_name: str, policy: NamingPolicy, aggregate_name: Optional[str] = None
) -> str:
    """
    Format the class-facing name of an aggregate or sub-entity.

    Args:
        raw_name: Key of the item in the model
        policy: Naming policy of the item's kind
        aggregate_name: Owning aggregate key (sub-entities only)

    Returns:
        CapitalCase published name
    """
    suffixed = ensure_suffix(raw_name, policy.suffix)
    if aggregate_name is not None and policy.prefix_aggregate_name:
        return ensure_suffix(aggregate_name, suffixed)
    return suffixed


def format_file_name(
    raw_name: str, policy: NamingPolicy, aggregate_name: Optional[str] = None
) -> str:
    """
    Format the output file name of an aggregate or sub-entity.

    Args:
        raw_name: Key of the item in the model
        policy: Naming policy of the item's kind
        aggregate_name: Owning aggregate key (sub-entities only)

    Returns:
        Lowercase hyphenated file name including the policy extension
    """
    prefix = ""
    if aggregate_name is not None and policy.prefix_aggregate_name:
        prefix = capitalize_first_letter(aggregate_name)

    # Combine, suffix, then split and lowercase
    formatted = prefix + capitalize_first_letter(raw_name)
    formatted = ensure_suffix(formatted, policy.suffix)
    formatted = split_on_capital_boundaries(formatted, FILE_NAME_DIVIDER)

    return formatted + policy.extension


class NamingStrategy(ABC):
    """Derives published and file names for one kind of model item."""

    kind: Optional[EntityKind] = None

    def __init__(self, policy: NamingPolicy):
        self.policy = policy

    @property
    def folder(self) -> str:
        return self.policy.folder

    def published_name(self, name: str, aggregate_name: Optional[str] = None) -> str:
        return format_published_name(name, self.policy, aggregate_name)

    def file_name(self, name: str, aggregate_name: Optional[str] = None) -> str:
        return format_file_name(name, self.policy, aggregate_name)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.policy!r})"


class AggregateNaming(NamingStrategy):
    """Aggregates are never prefixed, whatever the policy says."""

    def published_name(self, name: str, aggregate_name: Optional[str] = None) -> str:
        return format_published_name(name, self.policy)

    def file_name(self, name: str, aggregate_name: Optional[str] = None) -> str:
        return format_file_name(name, self.policy)


class EntityNaming(NamingStrategy):
    """Naming for sub-entities, optionally prefixed with the aggregate name."""

    def published_name(self, name: str, aggregate_name: Optional[str] = None) -> str:
        if aggregate_name is None:
            raise ValueError(f"{self.kind.value} names require an aggregate name")
        return format_published_name(name, self.policy, aggregate_name)

    def file_name(self, name: str, aggregate_name: Optional[str] = None) -> str:
        if aggregate_name is None:
            raise ValueError(f"{self.kind.value} names require an aggregate name")
        return format_file_name(name, self.policy, aggregate_name)


class CommandNaming(EntityNaming):
    kind = EntityKind.COMMAND


class EventNaming(EntityNaming):
    kind = EntityKind.EVENT


class FaultNaming(EntityNaming):
    kind = EntityKind.FAULT


ENTITY_NAMING: Dict[EntityKind, Type[EntityNaming]] = {
    EntityKind.COMMAND: CommandNaming,
    EntityKind.EVENT: EventNaming,
    EntityKind.FAULT: FaultNaming,
}


def naming_for(kind: Optional[EntityKind], policy: NamingPolicy) -> NamingStrategy:
    """
    Select the naming strategy for a kind.

    Args:
        kind: Sub-entity kind, or None for aggregates
        policy: Naming policy configured for that kind

    Returns:
        Strategy instance bound to the policy
    """
    if kind is None:
        return AggregateNaming(policy)
    return ENTITY_NAMING[kind](policy)
