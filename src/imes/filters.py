"""
Filter types and predicate constructors.

A filter describes constraints on a single field. Stores never interpret
filters directly: each store is given a ``get_filter_predicates`` generator
that maps the fields of a query filter to predicates built here, and the
store keeps only items satisfying every yielded predicate.

Any constraint left as ``None`` is unconstrained, so an empty filter passes
every value. A ``None`` field value fails any filter that sets at least one
constraint.

Example:
    >>> def post_predicates(filter_):
    ...     if filter_.title is not None:
    ...         yield lambda post: equal_predicate(filter_.title)(post.data["title"])
    ...         yield lambda post: prefix_predicate(filter_.title)(post.data["title"])
    ...     if filter_.score is not None:
    ...         yield lambda post: ord_predicate(filter_.score)(post.data["score"])
"""

from collections.abc import Callable, Collection, Iterator, Mapping
from dataclasses import dataclass, fields
from typing import Any

Predicate = Callable[[Any], bool]


def _is_empty(filter_: Any) -> bool:
    return all(getattr(filter_, f.name) is None for f in fields(filter_))


@dataclass(frozen=True)
class EqualFilter:
    """
    Equality constraints on a field.

    Attributes:
        eq: Value must equal this
        ne: Value must differ from this
        in_: Value must be a member of this collection

    Example:
        >>> EqualFilter(eq=False)
        >>> EqualFilter.one_of(["draft", "review"])
    """

    eq: Any = None
    ne: Any = None
    in_: Collection[Any] | None = None

    @classmethod
    def one_of(cls, values: Collection[Any]) -> "EqualFilter":
        """Create a set-membership filter."""
        return cls(in_=values)


@dataclass(frozen=True)
class OrdFilter:
    """
    Range constraints on an ordered field.

    Example:
        >>> OrdFilter(gt=11, lte=15)
    """

    eq: Any = None
    gt: Any = None
    gte: Any = None
    lt: Any = None
    lte: Any = None


@dataclass(frozen=True)
class PrefixFilter:
    """String prefix constraint on a field."""

    prefix: str | None = None


@dataclass(frozen=True)
class TextFilter:
    """
    Equality and prefix constraints on a text field.

    Both :func:`equal_predicate` and :func:`prefix_predicate` accept a
    ``TextFilter``; a store yields both predicates for the field so they
    AND together.
    """

    eq: str | None = None
    ne: str | None = None
    in_: Collection[str] | None = None
    prefix: str | None = None


def equal_predicate(filter_: EqualFilter | TextFilter) -> Predicate:
    """
    Build a predicate from the equality constraints of a filter.

    Args:
        filter_: Filter carrying ``eq``, ``ne`` and ``in_``

    Returns:
        Predicate over a field value
    """
    eq, ne, in_ = filter_.eq, filter_.ne, filter_.in_
    if eq is None and ne is None and in_ is None:
        return lambda value: True

    def predicate(value: Any) -> bool:
        if value is None:
            return False
        if eq is not None and value != eq:
            return False
        if ne is not None and value == ne:
            return False
        if in_ is not None and value not in in_:
            return False
        return True

    return predicate


def ord_predicate(filter_: OrdFilter) -> Predicate:
    """
    Build a predicate from range constraints.

    Args:
        filter_: Filter carrying any of ``eq``, ``gt``, ``gte``, ``lt``, ``lte``

    Returns:
        Predicate over a field value
    """
    if _is_empty(filter_):
        return lambda value: True

    def predicate(value: Any) -> bool:
        if value is None:
            return False
        if filter_.eq is not None and value != filter_.eq:
            return False
        if filter_.gt is not None and not value > filter_.gt:
            return False
        if filter_.gte is not None and not value >= filter_.gte:
            return False
        if filter_.lt is not None and not value < filter_.lt:
            return False
        if filter_.lte is not None and not value <= filter_.lte:
            return False
        return True

    return predicate


def prefix_predicate(filter_: PrefixFilter | TextFilter) -> Predicate:
    """
    Build a predicate from a prefix constraint.

    Args:
        filter_: Filter carrying ``prefix``

    Returns:
        Predicate over a string field value
    """
    prefix = filter_.prefix
    if prefix is None:
        return lambda value: True

    def predicate(value: Any) -> bool:
        if value is None:
            return False
        return str(value).startswith(prefix)

    return predicate


def item_field(item: Any, name: str) -> Any:
    """
    Read a domain field from an item.

    Looks in ``item.data`` when the item has one (projection items and
    events), otherwise in the item itself. Mappings are read by key and
    other objects by attribute; a missing field reads as None.
    """
    data = getattr(item, "data", item)
    if isinstance(data, Mapping):
        return data.get(name)
    return getattr(data, name, None)


def field_predicates(
    filter_: Mapping[str, Any],
    get_value: Callable[[Any, str], Any] = item_field,
) -> Iterator[Predicate]:
    """
    Yield item predicates for a ``{field: constraint}`` mapping.

    Each constraint may be an :class:`EqualFilter`, :class:`OrdFilter`,
    :class:`PrefixFilter` or :class:`TextFilter`; any other value means
    plain equality. This is the default filter interpretation of
    ``InMemoryStore``.

    Example:
        >>> query = Query(filter={"published": False, "score": OrdFilter(gte=5)})
    """
    for name, constraint in filter_.items():
        if isinstance(constraint, TextFilter):
            yield _on_field(name, equal_predicate(constraint), get_value)
            yield _on_field(name, prefix_predicate(constraint), get_value)
        elif isinstance(constraint, EqualFilter):
            yield _on_field(name, equal_predicate(constraint), get_value)
        elif isinstance(constraint, OrdFilter):
            yield _on_field(name, ord_predicate(constraint), get_value)
        elif isinstance(constraint, PrefixFilter):
            yield _on_field(name, prefix_predicate(constraint), get_value)
        else:
            yield _on_field(name, equal_predicate(EqualFilter(eq=constraint)), get_value)


def _on_field(
    name: str,
    predicate: Predicate,
    get_value: Callable[[Any, str], Any],
) -> Predicate:
    return lambda item: predicate(get_value(item, name))


__all__ = [
    "EqualFilter",
    "OrdFilter",
    "PrefixFilter",
    "TextFilter",
    "Predicate",
    "equal_predicate",
    "ord_predicate",
    "prefix_predicate",
    "item_field",
    "field_predicates",
]
