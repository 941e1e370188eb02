"""
Pattern registry for component and version detection.

This package provides:
- Patterns with compile validation and version extraction
- A matching engine over immutable pattern snapshots
- Translation of client filters into parametrized SQL predicates
- Owned, versioned registry patterns backed by SQLAlchemy
"""

from .models import Pattern, PatternMatch, RegistryPattern, compile_expression
from .matching import PatternMatcher, run_matcher
from .filters import Filter, FilterTranslator, REGISTRY_PATTERN_FILTERS, parse_query_filters

__all__ = [
    'Pattern',
    'PatternMatch',
    'RegistryPattern',
    'compile_expression',
    'PatternMatcher',
    'run_matcher',
    'Filter',
    'FilterTranslator',
    'REGISTRY_PATTERN_FILTERS',
    'parse_query_filters'
]
