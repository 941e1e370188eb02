"""Matching engine applying a pattern collection to input bytes."""

from typing import Iterable, List, Tuple, Union

from .models import Pattern, PatternMatch


def run_matcher(patterns: Iterable[Pattern], data: Union[bytes, str]) -> List[PatternMatch]:
    """
    Match every pattern against the input.

    Patterns are evaluated independently and in order; a match on one
    pattern never stops evaluation of the next.

    Args:
        patterns: Patterns to apply
        data: Input to search

    Returns:
        All matches, ordered by pattern position
    """
    matches: List[PatternMatch] = []
    for pattern in patterns:
        matches.extend(pattern.match(data))
    return matches


class PatternMatcher:
    """
    Matches input against an immutable snapshot of patterns.

    The snapshot is a tuple replaced wholesale by ``reload``; a call to
    ``match`` reads the reference once, so it always sees one consistent
    collection even while another thread reloads.
    """

    def __init__(self, patterns: Iterable[Pattern] = ()):
        self._patterns: Tuple[Pattern, ...] = tuple(patterns)

    @property
    def patterns(self) -> Tuple[Pattern, ...]:
        """Current pattern snapshot."""
        return self._patterns

    def reload(self, patterns: Iterable[Pattern]) -> None:
        """Publish a new pattern snapshot."""
        self._patterns = tuple(patterns)

    def match(self, data: Union[bytes, str]) -> List[PatternMatch]:
        """Match the current snapshot against the input."""
        return run_matcher(self._patterns, data)

    def __len__(self) -> int:
        return len(self._patterns)
