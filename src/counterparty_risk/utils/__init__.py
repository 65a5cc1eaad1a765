"""
Risk Utilities Package

Contains utility functions shared by the analyzers:
- Keyword and clause-pattern matching with context windows
- Rule-based entity extraction from contract text
- Best-effort concurrent fan-out returning tagged results
- A simple wall-clock timer
"""

from .matchers import (
    context_window,
    matching_terms,
    scan,
    compile_patterns,
    compile_pattern_groups,
    search_patterns,
    flag_patterns,
    count_pattern_hits
)

from .feature_extractor import (
    EntityExtractor,
    ExtractedEntities
)

from .concurrency import (
    settle,
    gather_settled,
    Timer
)

__all__ = [
    "context_window",
    "matching_terms",
    "scan",
    "compile_patterns",
    "compile_pattern_groups",
    "search_patterns",
    "flag_patterns",
    "count_pattern_hits",
    "EntityExtractor",
    "ExtractedEntities",
    "settle",
    "gather_settled",
    "Timer"
]
