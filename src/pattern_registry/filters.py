"""Translation of client query filters into parametrized SQL predicates."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterable, List, Mapping, Tuple
import re

from .exceptions import FilterAttributeError, FilterOperatorError, FilterValueError

EQ = "eq"

QUERY_KEY_PATTERN = re.compile(r"^(?P<attribute>\w+)\[(?P<operator>\w+)\]$")

INTEGER_VALUE = re.compile(r"-?\d+", re.ASCII)


@dataclass(frozen=True)
class Filter:
    """
    A single client-supplied constraint.

    Attributes:
        attribute: Field to filter on
        operator: Operator token, e.g. ``eq``
        value: Raw value, always bound as a query parameter
    """
    attribute: str
    operator: str
    value: str


def string_filter(query_filter: Filter, placeholder: str) -> str:
    """Convert a filter on a textual attribute."""
    if query_filter.operator == EQ:
        return f"{query_filter.attribute} = {placeholder}"
    raise FilterOperatorError(
        f"Unsupported operator {query_filter.operator!r} for attribute {query_filter.attribute!r}"
    )


def number_filter(query_filter: Filter, placeholder: str) -> str:
    """Convert a filter on a numeric attribute."""
    fragment = string_filter(query_filter, placeholder)
    value = query_filter.value
    # The raw value is bound as is, so it must already be a plain decimal
    if not isinstance(value, str) or not INTEGER_VALUE.fullmatch(value):
        raise FilterValueError(
            f"Attribute {query_filter.attribute!r} expects an integer, got {value!r}"
        )
    return fragment


FilterConverter = Callable[[Filter, str], str]

# Attributes of a registry pattern that clients may filter on
REGISTRY_PATTERN_FILTERS: Mapping[str, FilterConverter] = MappingProxyType({
    "id": number_filter,
    "pattern": string_filter,
    "component": string_filter,
    "owner": number_filter,
    "version": number_filter,
})


class FilterTranslator:
    """
    Translates filters into a predicate fragment and bound arguments.

    The converter mapping is the closed set of filterable attributes; it is
    copied on construction and never changes afterwards.
    """

    def __init__(self, converters: Mapping[str, FilterConverter] = REGISTRY_PATTERN_FILTERS,
                 placeholder: str = "?"):
        """
        Initialize the translator.

        Args:
            converters: Attribute name to converter for that attribute's shape
            placeholder: Positional parameter marker of the target driver
        """
        self._converters = MappingProxyType(dict(converters))
        self.placeholder = placeholder

    @property
    def attributes(self) -> Tuple[str, ...]:
        """Names of filterable attributes."""
        return tuple(self._converters)

    def translate(self, filters: Iterable[Filter]) -> Tuple[str, List[str]]:
        """
        Translate filters, combining them with AND in input order.

        Args:
            filters: Filters to translate

        Returns:
            Tuple of (predicate fragment, bound arguments); an empty fragment
            means no predicate

        Raises:
            FilterAttributeError: If an attribute may not be filtered on
            FilterOperatorError: If an operator is unsupported for its attribute
            FilterValueError: If a value does not fit its attribute's shape
        """
        fragments: List[str] = []
        args: List[str] = []
        for query_filter in filters:
            converter = self._converters.get(query_filter.attribute)
            if converter is None:
                raise FilterAttributeError(
                    f"Attribute {query_filter.attribute!r} may not be filtered on"
                )
            fragments.append(converter(query_filter, self.placeholder))
            args.append(query_filter.value)
        return " AND ".join(fragments), args


def parse_query_filters(query_args) -> List[Filter]:
    """
    Parse ``attribute[operator]=value`` query parameters into filters.

    Args:
        query_args: A multi-dict such as ``flask.request.args``, or a plain
            mapping of key to value or list of values

    Returns:
        Filters in query order; keys of any other shape are ignored
    """
    if hasattr(query_args, "lists"):
        items = query_args.lists()
    else:
        items = query_args.items()

    filters: List[Filter] = []
    for key, values in items:
        match = QUERY_KEY_PATTERN.match(key)
        if not match:
            continue
        if isinstance(values, str):
            values = [values]
        for value in values:
            filters.append(Filter(
                attribute=match.group("attribute"),
                operator=match.group("operator"),
                value=value
            ))
    return filters
