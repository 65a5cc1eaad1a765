"""
Keyword and Pattern Matchers

Reusable primitives for scanning document text:
- Category-tagged keyword lists (case-insensitive substring containment)
- Named regular-expression clause patterns
- Context windows around each hit

None of these functions raise on empty input; they return empty results.
"""

import re
from typing import Dict, Iterable, List, Mapping, Optional, Pattern, Sequence

from ..models.results import KeywordMatch


def context_window(text: Optional[str], term: Optional[str], radius: int = 100) -> str:
    """Substring around the first case-insensitive occurrence of term, clipped to text bounds"""
    if not text or not term:
        return ""
    index = text.lower().find(term.lower())
    if index == -1:
        return ""
    start = max(0, index - radius)
    end = min(len(text), index + len(term) + radius)
    return text[start:end]


def span_window(text: str, start: int, end: int, radius: int) -> str:
    """Substring around an explicit match span"""
    return text[max(0, start - radius):min(len(text), end + radius)]


def matching_terms(text: Optional[str], terms: Iterable[str]) -> List[str]:
    """Terms contained in the text, in list order"""
    if not text:
        return []
    text_lower = text.lower()
    return [term for term in terms if term.lower() in text_lower]


def scan(text: Optional[str],
         terms_by_category: Mapping[str, Sequence[str]],
         radius: int = 50) -> Dict[str, List[KeywordMatch]]:
    """Scan text for each category's terms, returning matches with context"""
    results: Dict[str, List[KeywordMatch]] = {category: [] for category in terms_by_category}
    if not text:
        return results

    for category, terms in terms_by_category.items():
        for term in matching_terms(text, terms):
            results[category].append(KeywordMatch(
                keyword=term,
                context=context_window(text, term, radius)
            ))
    return results


def compile_patterns(patterns: Mapping[str, str]) -> Dict[str, Pattern]:
    """Compile named patterns case-insensitively, keeping declaration order"""
    return {name: re.compile(pattern, re.IGNORECASE) for name, pattern in patterns.items()}


def compile_pattern_groups(groups: Mapping[str, Sequence[str]]) -> Dict[str, List[Pattern]]:
    """Compile groups of patterns case-insensitively"""
    return {
        name: [re.compile(pattern, re.IGNORECASE) for pattern in patterns]
        for name, patterns in groups.items()
    }


def search_patterns(text: Optional[str],
                    compiled: Mapping[str, Pattern],
                    radius: int = 100) -> Dict[str, str]:
    """Names of the patterns that fire, mapped to the context of their first match"""
    if not text:
        return {}
    hits = {}
    for name, pattern in compiled.items():
        match = pattern.search(text)
        if match:
            hits[name] = span_window(text, match.start(), match.end(), radius)
    return hits


def flag_patterns(text: Optional[str], compiled: Mapping[str, Pattern]) -> Dict[str, bool]:
    """Boolean indicator per named pattern"""
    if not text:
        return {name: False for name in compiled}
    return {name: bool(pattern.search(text)) for name, pattern in compiled.items()}


def count_pattern_hits(text: Optional[str], patterns: Iterable[Pattern]) -> int:
    """Number of patterns that fire at least once"""
    if not text:
        return 0
    return sum(1 for pattern in patterns if pattern.search(text))
