"""Data models for registered patterns and their matches."""

from dataclasses import dataclass, field
from typing import List, Dict, Mapping, Optional, Any, Union
import re

from .exceptions import CompileError, ImmutableFieldError, ValidationError

VERSION_GROUP = "version"

# Bytes that are not valid UTF-8 map to lone surrogates and back again
INPUT_ERRORS = "surrogateescape"


def compile_expression(expression: str) -> "re.Pattern[str]":
    """
    Compile a pattern expression.

    Patterns match text decoded from the input bytes, so ``.`` and character
    classes work on whole UTF-8 characters.

    Args:
        expression: Regular expression source

    Returns:
        Compiled pattern

    Raises:
        CompileError: If the expression is not valid regex syntax or is not
            encodable as UTF-8
    """
    if not isinstance(expression, str):
        raise CompileError(repr(expression), "expression must be a string")
    try:
        expression.encode("utf-8")
        return re.compile(expression)
    except (re.error, OverflowError, RecursionError, UnicodeError) as e:
        raise CompileError(expression, str(e)) from e


@dataclass
class Pattern:
    """
    A regular expression tagged with the component it identifies.

    Attributes:
        expression: The regular expression source, serialized as ``pattern``
        component: Free-text label grouping patterns by subject
        id: Identity assigned by the storage layer, fixed once set

    The compiled form is derived from ``expression`` and rebuilt on every
    assignment, so a Pattern whose expression does not compile can never
    exist.
    """
    expression: str
    component: str = ""
    id: Optional[int] = None
    _compiled: "re.Pattern[str]" = field(init=False, repr=False, compare=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "expression":
            # Compile first so a failed assignment leaves the pattern untouched
            object.__setattr__(self, "_compiled", compile_expression(value))
        elif name == "id" and self.id is not None and value != self.id:
            raise ImmutableFieldError(f"Pattern id {self.id} cannot be changed")
        object.__setattr__(self, name, value)

    @property
    def compiled(self) -> "re.Pattern[str]":
        """Compiled form of the expression."""
        return self._compiled

    def match(self, data: Union[bytes, str]) -> List["PatternMatch"]:
        """
        Match the pattern against input bytes.

        Input is decoded as UTF-8 so patterns see whole characters. Bytes
        that are not valid UTF-8 still match literally as escaped code points.
        At most one match is returned, taken from the leftmost occurrence.
        The ``version`` named group, when present and participating, becomes
        the match version.

        Args:
            data: Input to search

        Returns:
            A list holding one PatternMatch, or an empty list on no match
        """
        is_text = isinstance(data, str)
        text = data if is_text else bytes(data).decode("utf-8", INPUT_ERRORS)

        match = self._compiled.search(text)
        if match is None:
            return []

        version = ""
        if VERSION_GROUP in self._compiled.groupindex:
            version = match.group(VERSION_GROUP) or ""
        if version and not is_text:
            version = version.encode("utf-8", INPUT_ERRORS).decode("utf-8", errors="replace")

        return [PatternMatch(pattern=self.snapshot(), version=version)]

    def snapshot(self) -> "Pattern":
        """Copy the serializable fields into a detached Pattern."""
        return Pattern(expression=self.expression, component=self.component, id=self.id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert pattern to dictionary representation."""
        return {
            "id": self.id,
            "pattern": self.expression,
            "component": self.component
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pattern":
        """Build a Pattern from its dictionary representation, compiling it."""
        return cls(**_pattern_fields(data))


@dataclass(frozen=True)
class PatternMatch:
    """
    Result of a successful pattern match.

    Attributes:
        pattern: Snapshot of the pattern that matched
        version: Text captured by the ``version`` group, or empty
    """
    pattern: Pattern
    version: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert match to dictionary representation, omitting an empty version."""
        result: Dict[str, Any] = {"pattern": self.pattern.to_dict()}
        if self.version:
            result["version"] = self.version
        return result


@dataclass
class RegistryPattern(Pattern):
    """
    A persisted pattern owned by an organization.

    Attributes:
        owner: Organization that created the pattern
        version: Revision counter, 1 on creation
    """
    owner: Optional[int] = None
    version: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert registry pattern to dictionary representation."""
        result = super().to_dict()
        result.update({
            "version": self.version,
            "owner": self.owner
        })
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryPattern":
        """
        Build a draft from client input.

        Ownership and revision are assigned by the registry, so client
        supplied ``owner`` and ``version`` are ignored.
        """
        return cls(**_pattern_fields(data))

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> "RegistryPattern":
        """Build a stored pattern, keeping its owner and version."""
        return cls(**_pattern_fields(data), owner=data.get("owner"), version=data.get("version"))


def _pattern_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Extract and type-check serializable pattern fields."""
    if not isinstance(data, Mapping):
        raise ValidationError("Pattern must be a JSON object")
    if "pattern" not in data:
        raise ValidationError("Missing required field: pattern")

    component = data.get("component") or ""
    if not isinstance(component, str):
        raise ValidationError("component must be a string")

    pattern_id = data.get("id")
    if pattern_id is not None and (isinstance(pattern_id, bool) or not isinstance(pattern_id, int)):
        raise ValidationError("id must be an integer")

    return {
        "expression": data["pattern"],
        "component": component,
        "id": pattern_id
    }
