"""Fallback-chain field resolution for loosely structured upstream records.

Upstream providers have shipped several schema shapes for the same concept
(price directly on the object or nested under transfer details, area under
``algemeen`` or ``detail``, ...). Instead of chained ``or`` expressions every
canonical field declares an ordered list of ``FieldRule`` entries. The
resolver walks the list and takes the first rule whose path exists and whose
transform accepts the value.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional, Sequence, Tuple


def identity(value: Any) -> Any:
    return value


def is_absent(value: Any) -> bool:
    """None, empty strings and empty containers carry no data."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return not value
    return False


def get_path(record: Any, path: Sequence[str]) -> Any:
    """Walk ``path`` through nested mappings, returning None when any step is missing.

    Non-mapping intermediate nodes (a string where an object was expected, a
    list, ...) are treated as missing rather than raising.

    Example:
        >>> get_path({"adres": {"plaats": "Schiedam"}}, ("adres", "plaats"))
        'Schiedam'
        >>> get_path({"adres": "Schiedam"}, ("adres", "plaats")) is None
        True
    """
    node = record
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
        if node is None:
            return None
    return node


@dataclass(frozen=True)
class FieldRule:
    """One extraction rule: a key path plus a transform applied to the value found there.

    A transform signals "unusable" by returning None or raising ValueError/TypeError;
    the resolver then moves on to the next rule.
    """

    path: Tuple[str, ...]
    transform: Callable[[Any], Any] = identity

    @property
    def dotted_path(self) -> str:
        return ".".join(self.path)

    def apply(self, record: Any) -> Any:
        value = get_path(record, self.path)
        if is_absent(value):
            return None
        try:
            result = self.transform(value)
        except (TypeError, ValueError):
            return None
        return None if is_absent(result) else result


def rule(dotted_path: str, transform: Callable[[Any], Any] = identity) -> FieldRule:
    """Shorthand for ``FieldRule(tuple(dotted_path.split(".")), transform)``."""
    return FieldRule(tuple(dotted_path.split(".")), transform)


@dataclass(frozen=True)
class ResolvedField:
    """Outcome of resolving one field.

    Attributes:
        value: Resolved value, or the field default
        source: Dotted path of the rule that produced the value, None when defaulted
    """

    value: Any
    source: Optional[str] = None

    @property
    def defaulted(self) -> bool:
        return self.source is None


@dataclass(frozen=True)
class FieldResolver:
    """Ordered fallback chain for a single canonical field."""

    name: str
    rules: Tuple[FieldRule, ...]
    default: Any = None

    def resolve_with_source(self, record: Any) -> ResolvedField:
        for candidate in self.rules:
            value = candidate.apply(record)
            if value is not None:
                return ResolvedField(value=value, source=candidate.dotted_path)
        return ResolvedField(value=self.default)

    def resolve(self, record: Any) -> Any:
        return self.resolve_with_source(record).value


def chain(name: str, *rules: FieldRule, default: Any = None) -> FieldResolver:
    """Build a FieldResolver from positional rules."""
    return FieldResolver(name=name, rules=tuple(rules), default=default)


def iter_entries(record: Any, paths: Iterable[Sequence[str]]) -> Iterator[Mapping]:
    """Yield every mapping entry of the collections found at ``paths``, in order.

    Missing collections and non-mapping entries are skipped.
    """
    for path in paths:
        collection = get_path(record, path)
        if not isinstance(collection, (list, tuple)):
            continue
        for entry in collection:
            if isinstance(entry, Mapping):
                yield entry


def first_present(entry: Mapping, keys: Iterable[str]) -> Optional[Any]:
    """Return the first non-absent value among ``keys`` of ``entry``."""
    for key in keys:
        value = entry.get(key)
        if not is_absent(value):
            return value
    return None
