"""
Legal Pattern Analyzer

Regex-driven legal analysis of contract text:
- Contract structure completeness (parties, consideration, obligations, ...)
- Risk distribution (unilateral, mutual, balanced)
- Enforcement mechanisms (arbitration, litigation, injunctive relief, ...)
- Industry detection and compliance requirements
- Precedent search through an optional case-law provider plus built-in cases
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..models.results import Serializable, unique_strings, utc_timestamp
from ..models.risk_config import LegalTaxonomy
from ..providers.case_law import CaseSummary, MOCK_SEARCH_RESULTS
from ..utils.concurrency import gather_settled
from ..utils.matchers import (
    compile_pattern_groups, compile_patterns, count_pattern_hits, flag_patterns, matching_terms
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractStructure(Serializable):
    elements: Mapping[str, bool]
    completeness: float
    missing_elements: Tuple[str, ...]
    score: str


@dataclass(frozen=True)
class RiskDistribution(Serializable):
    type: str
    confidence: int
    recommendation: str


@dataclass(frozen=True)
class EnforcementAnalysis(Serializable):
    mechanisms: Mapping[str, bool]
    available_mechanisms: Tuple[str, ...]
    strength: str
    recommendations: Tuple[str, ...]


@dataclass(frozen=True)
class IndustryCompliance(Serializable):
    detected_industry: str
    compliance_requirements: Tuple[str, ...] = ()
    recommended_clauses: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LegalPatterns(Serializable):
    """Structure, distribution, enforcement and industry findings"""
    contract_structure: ContractStructure
    risk_distribution: RiskDistribution
    enforcement_mechanisms: EnforcementAnalysis
    industry_compliance: IndustryCompliance
    limited: bool = False
    note: Optional[str] = None

    @classmethod
    def default(cls, taxonomy: Optional[LegalTaxonomy] = None) -> "LegalPatterns":
        """Fixed limited-analysis structure used when pattern analysis fails"""
        taxonomy = taxonomy or LegalTaxonomy()
        return cls(
            contract_structure=ContractStructure(
                elements={}, completeness=50, missing_elements=(), score="fair"
            ),
            risk_distribution=RiskDistribution(
                type="unclear", confidence=0,
                recommendation=taxonomy.risk_distribution_recommendations.get("unclear", "")
            ),
            enforcement_mechanisms=EnforcementAnalysis(
                mechanisms={}, available_mechanisms=(), strength="moderate", recommendations=()
            ),
            industry_compliance=IndustryCompliance(
                detected_industry="general",
                compliance_requirements=tuple(taxonomy.industry_requirements.get("general", ())),
                recommended_clauses=tuple(taxonomy.recommended_clauses.get("general", ()))
            ),
            limited=True,
            note="Limited analysis - pattern analysis unavailable"
        )


@dataclass(frozen=True)
class LegalAnalysis(Serializable):
    """Precedents and pattern findings for one document"""
    precedents: Tuple[CaseSummary, ...]
    open_source_cases: Tuple[CaseSummary, ...]
    patterns: LegalPatterns
    search_keywords: Tuple[str, ...] = ()
    search_timestamp: str = field(default_factory=utc_timestamp)
    note: Optional[str] = None
    degraded: bool = False

    @classmethod
    def limited(cls, taxonomy: Optional[LegalTaxonomy] = None) -> "LegalAnalysis":
        return cls(
            precedents=(),
            open_source_cases=(),
            patterns=LegalPatterns.default(taxonomy),
            note="Limited analysis - legal database services unavailable",
            degraded=True
        )


class LegalPatternAnalyzer:
    """Legal pattern recognition and precedent search"""

    SEARCH_KEYWORD_LIMIT = 3

    def __init__(self, taxonomy: Optional[LegalTaxonomy] = None, case_law: Any = None):
        """
        Initialize the analyzer

        Args:
            taxonomy: Pattern tables, defaults to the built-in legal taxonomy
            case_law: Provider exposing ``async search(keywords)``; when absent
                the built-in mock search results are used
        """
        self.taxonomy = taxonomy or LegalTaxonomy()
        self.case_law = case_law

        self._structure_patterns = compile_patterns(self.taxonomy.structure_indicators)
        self._distribution_patterns = compile_pattern_groups(self.taxonomy.risk_distribution_patterns)
        self._enforcement_patterns = compile_patterns(self.taxonomy.enforcement_patterns)
        self._industry_patterns = compile_patterns(self.taxonomy.industry_patterns)
        self._mock_cases = [CaseSummary.from_mapping(case) for case in self.taxonomy.mock_cases]

    async def search_precedents(self, text: str, document_type: str = "contract") -> LegalAnalysis:
        """Search precedents and analyze patterns, isolating each branch's failure"""
        try:
            keywords = self.extract_legal_keywords(text)
        except Exception as e:
            logger.error(f"Legal keyword extraction failed: {e}")
            return LegalAnalysis.limited(self.taxonomy)

        results = await gather_settled({
            "case_law": self._search_case_law(keywords),
            "open_source_cases": self._run(self.search_open_source_cases, keywords),
            "patterns": self._run(self.analyze_patterns, text, document_type),
        })

        return LegalAnalysis(
            precedents=tuple(results["case_law"].unwrap_or([])),
            open_source_cases=tuple(results["open_source_cases"].unwrap_or([])),
            patterns=results["patterns"].unwrap_or(None) or LegalPatterns.default(self.taxonomy),
            search_keywords=tuple(keywords)
        )

    @staticmethod
    async def _run(func, *args):
        return func(*args)

    async def _search_case_law(self, keywords: Sequence[str]) -> List[CaseSummary]:
        if self.case_law is None:
            logger.warning("No case law provider configured - using mock results")
            return list(MOCK_SEARCH_RESULTS)
        return await self.case_law.search(list(keywords[:self.SEARCH_KEYWORD_LIMIT]))

    def extract_legal_keywords(self, text: str) -> List[str]:
        """Fixed legal terms present in the text"""
        return matching_terms(text, self.taxonomy.legal_terms)

    def search_open_source_cases(self, keywords: Sequence[str]) -> List[CaseSummary]:
        """Built-in cases mentioning any keyword, deduplicated by citation"""
        matches: Dict[Optional[str], CaseSummary] = {}
        for keyword in keywords:
            for case in self._mock_cases:
                if case.citation not in matches and case.mentions(keyword):
                    matches[case.citation] = case
        return list(matches.values())

    def analyze_patterns(self, text: str, document_type: str = "contract") -> LegalPatterns:
        try:
            return LegalPatterns(
                contract_structure=self.analyze_contract_structure(text),
                risk_distribution=self.analyze_risk_distribution(text),
                enforcement_mechanisms=self.analyze_enforcement_mechanisms(text),
                industry_compliance=self.check_industry_compliance(text, document_type)
            )
        except Exception as e:
            logger.error(f"Legal pattern analysis failed: {e}")
            return LegalPatterns.default(self.taxonomy)

    def analyze_contract_structure(self, text: str) -> ContractStructure:
        elements = flag_patterns(text, self._structure_patterns)
        found = sum(1 for present in elements.values() if present)
        total = len(elements)

        if found >= 5:
            score = "good"
        elif found >= 3:
            score = "fair"
        else:
            score = "poor"

        return ContractStructure(
            elements=elements,
            completeness=(found / total) * 100 if total else 0,
            missing_elements=tuple(name for name, present in elements.items() if not present),
            score=score
        )

    def analyze_risk_distribution(self, text: str) -> RiskDistribution:
        """Category with the most pattern hits; earlier categories win ties"""
        distribution = "unclear"
        best = 0
        for category, patterns in self._distribution_patterns.items():
            hits = count_pattern_hits(text, patterns)
            if hits > best:
                best = hits
                distribution = category

        return RiskDistribution(
            type=distribution,
            confidence=best,
            recommendation=self.taxonomy.risk_distribution_recommendations.get(distribution, "")
        )

    def analyze_enforcement_mechanisms(self, text: str) -> EnforcementAnalysis:
        mechanisms = flag_patterns(text, self._enforcement_patterns)
        available = tuple(name for name, present in mechanisms.items() if present)

        if len(available) >= 2:
            strength = "strong"
        elif len(available) == 1:
            strength = "moderate"
        else:
            strength = "weak"

        return EnforcementAnalysis(
            mechanisms=mechanisms,
            available_mechanisms=available,
            strength=strength,
            recommendations=tuple(self._enforcement_recommendations(len(available)))
        )

    def _enforcement_recommendations(self, count: int) -> List[str]:
        if count == 0:
            return ["Add dispute resolution mechanism", "Consider arbitration clause"]
        if count == 1:
            return ["Consider adding backup enforcement mechanism"]
        return ["Enforcement mechanisms appear adequate"]

    def check_industry_compliance(self, text: str, document_type: str = "contract") -> IndustryCompliance:
        """Requirements for the detected industry; the last matching industry wins"""
        detected = "general"
        for industry, pattern in self._industry_patterns.items():
            if pattern.search(text):
                detected = industry

        return IndustryCompliance(
            detected_industry=detected,
            compliance_requirements=unique_strings(self.taxonomy.industry_requirements.get(detected, ())),
            recommended_clauses=unique_strings(self.taxonomy.recommended_clauses.get(detected, ()))
        )
