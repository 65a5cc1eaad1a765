"""
Entity Extraction Utilities

Extracts literal entity mentions from contract text:
- People (honorific-led names) and organizations (legal-suffix names)
- Places from a fixed list of jurisdictions
- Dates, monetary amounts and percentages
- Phone numbers and email addresses
"""

import re
from dataclasses import dataclass, field
from typing import List, Pattern, Sequence

from ..models.results import Serializable


@dataclass(frozen=True)
class ExtractedEntities(Serializable):
    """Entity mentions grouped by category; absent categories are empty"""
    people: List[str] = field(default_factory=list)
    places: List[str] = field(default_factory=list)
    organizations: List[str] = field(default_factory=list)
    dates: List[str] = field(default_factory=list)
    money: List[str] = field(default_factory=list)
    percentages: List[str] = field(default_factory=list)
    phone_numbers: List[str] = field(default_factory=list)
    emails: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(len(getattr(self, name)) for name in self.__dataclass_fields__)


class EntityExtractor:
    """Rule-based entity extraction over raw contract text"""

    ORGANIZATION_PATTERNS = [
        r"\b(?:[A-Z][A-Za-z0-9&'-]*\s+){1,4}(?:Inc\.?|LLC|L\.L\.C\.|Corp\.?|Corporation|Ltd\.?|Limited|LLP|LP|PLC|Co\.)(?=\W|$)",
        r"\b(?:[A-Z][A-Za-z0-9&'-]*\s+){1,4}(?:GmbH|AG|SA|BV|SpA|SRL|SARL)\b",
    ]

    PERSON_PATTERNS = [
        r"\b(?:Mr|Ms|Mrs|Dr|Prof)\.?\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*",
    ]

    PLACES = [
        "Alabama", "Alaska", "Arizona", "Arkansas", "California", "Colorado",
        "Connecticut", "Delaware", "Florida", "Georgia", "Hawaii", "Idaho",
        "Illinois", "Indiana", "Iowa", "Kansas", "Kentucky", "Louisiana",
        "Maine", "Maryland", "Massachusetts", "Michigan", "Minnesota",
        "Mississippi", "Missouri", "Montana", "Nebraska", "Nevada",
        "New Hampshire", "New Jersey", "New Mexico", "New York",
        "North Carolina", "North Dakota", "Ohio", "Oklahoma", "Oregon",
        "Pennsylvania", "Rhode Island", "South Carolina", "South Dakota",
        "Tennessee", "Texas", "Utah", "Vermont", "Virginia", "Washington",
        "West Virginia", "Wisconsin", "Wyoming",
        "United States", "Canada", "United Kingdom", "England", "Germany", "France",
        "Japan", "China", "Australia", "Brazil", "India", "Mexico", "Singapore",
    ]

    DATE_PATTERNS = [
        r"\b\d{1,2}[/-]\d{1,2}[/-]\d{2,4}\b",
        r"\b\d{4}-\d{2}-\d{2}\b",
        r"\b(?:January|February|March|April|May|June|July|August|September|October|November|December)\s+\d{1,2},?\s+\d{4}\b",
        r"\b\d{1,2}\s+(?:January|February|March|April|May|June|July|August|September|October|November|December)\s+\d{4}\b",
    ]

    MONEY_PATTERNS = [
        r"[$€£]\s?\d{1,3}(?:,\d{3})*(?:\.\d{2})?(?:\s?(?:million|billion|thousand))?",
        r"\b(?:USD|EUR|GBP|CAD|AUD|INR)\s?\d{1,3}(?:,\d{3})*(?:\.\d{2})?",
        r"\b\d{1,3}(?:,\d{3})*(?:\.\d{2})?\s(?:dollars|USD|EUR|GBP)\b",
    ]

    PERCENTAGE_PATTERNS = [
        r"\b\d+(?:\.\d+)?\s?%",
        r"\b\d+(?:\.\d+)?\s+percent\b",
    ]

    PHONE_PATTERNS = [
        r"(?:\+\d{1,3}[\s.-]?)?\(?\b\d{3}\)?[\s.-]\d{3}[\s.-]\d{4}\b",
    ]

    EMAIL_PATTERNS = [
        r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b",
    ]

    def __init__(self):
        self._organizations = self._compile(self.ORGANIZATION_PATTERNS)
        self._people = self._compile(self.PERSON_PATTERNS)
        self._places = self._compile(
            [r"\b" + re.escape(place) + r"\b" for place in self.PLACES]
        )
        self._dates = self._compile(self.DATE_PATTERNS)
        self._money = self._compile(self.MONEY_PATTERNS, re.IGNORECASE)
        self._percentages = self._compile(self.PERCENTAGE_PATTERNS, re.IGNORECASE)
        self._phones = self._compile(self.PHONE_PATTERNS)
        self._emails = self._compile(self.EMAIL_PATTERNS)

    @staticmethod
    def _compile(patterns: Sequence[str], flags: int = 0) -> List[Pattern]:
        return [re.compile(pattern, flags) for pattern in patterns]

    def extract(self, text: str) -> ExtractedEntities:
        """Extract all entity categories from text"""
        if not text:
            return ExtractedEntities()

        return ExtractedEntities(
            people=self._find_all(text, self._people),
            places=self._find_all(text, self._places),
            organizations=self._find_all(text, self._organizations),
            dates=self._find_all(text, self._dates),
            money=self._find_all(text, self._money),
            percentages=self._find_all(text, self._percentages),
            phone_numbers=self._find_all(text, self._phones),
            emails=self._find_all(text, self._emails)
        )

    def _find_all(self, text: str, patterns: Sequence[Pattern]) -> List[str]:
        """Matched literals ordered by position, deduplicated"""
        spans = []
        for pattern in patterns:
            for match in pattern.finditer(text):
                spans.append((match.start(), match.group().strip()))
        spans.sort(key=lambda item: item[0])
        return list(dict.fromkeys(literal for _, literal in spans if literal))
