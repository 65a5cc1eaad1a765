"""
Document Heuristic Analyzer

Analyzes raw document text for counterparty risk indicators including:
- Stemmed keyword sentiment
- Entity mentions (people, places, organizations, amounts, contacts)
- High/medium/low risk keyword buckets
- Counterparty identification and disclosure scoring
- Standard legal clause detection

Every sub-operation is guarded: a failure yields its documented fallback
value instead of aborting the whole analysis.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from nltk.stem import PorterStemmer
from nltk.tokenize import RegexpTokenizer

from ..models.results import (
    ClauseDetection, Deduction, KeywordMatch, Serializable, utc_timestamp
)
from ..models.risk_config import DocumentTaxonomy, RiskBands, RiskLevel
from ..utils.feature_extractor import EntityExtractor, ExtractedEntities
from ..utils.matchers import compile_patterns, matching_terms, scan, search_patterns

logger = logging.getLogger(__name__)

MANUAL_REVIEW = "Manual review recommended"
SOURCE_NAME = "Document Analysis"


@dataclass(frozen=True)
class SentimentResult(Serializable):
    """Keyword sentiment of the document"""
    score: float
    classification: str
    positive_count: int = 0
    negative_count: int = 0
    confidence: float = 0.0

    @classmethod
    def neutral(cls) -> "SentimentResult":
        return cls(score=0.0, classification="neutral")


@dataclass(frozen=True)
class RiskFactorAssessment(Serializable):
    """Risk keyword hits per bucket and the overall severity"""
    high: Tuple[KeywordMatch, ...] = ()
    medium: Tuple[KeywordMatch, ...] = ()
    low: Tuple[KeywordMatch, ...] = ()
    overall: str = "low"

    @classmethod
    def fallback(cls) -> "RiskFactorAssessment":
        return cls(overall="medium")

    def buckets(self) -> Dict[str, Tuple[KeywordMatch, ...]]:
        return {"high": self.high, "medium": self.medium, "low": self.low}


@dataclass(frozen=True)
class CounterpartyRiskScore(Serializable):
    """Counterparty identification and disclosure sub-score"""
    score: float
    risk_level: RiskLevel
    deductions: Tuple[Deduction, ...] = ()
    max_score: int = 100
    notes: Tuple[str, ...] = ()

    @classmethod
    def fallback(cls) -> "CounterpartyRiskScore":
        return cls(score=70, risk_level=RiskLevel.MEDIUM, notes=(MANUAL_REVIEW,))


@dataclass(frozen=True)
class ComparativeAnalysis(Serializable):
    """
    Placeholder for a comparison against a clause corpus.

    No corpus is consulted: observations come from two fixed trigger
    phrases and the similarity score is a constant.
    """
    document_type: str
    similarity_score: Optional[float] = 0.75
    common_clauses: Tuple[str, ...] = ()
    unusual_clauses: Tuple[str, ...] = ()
    industry_standards: Mapping[str, Any] = field(
        default_factory=lambda: {"compliance": "partial", "recommendations": []}
    )
    placeholder: bool = True
    available: bool = True
    note: str = "Placeholder observations - no corpus comparison performed"

    @classmethod
    def unavailable(cls, document_type: str) -> "ComparativeAnalysis":
        return cls(document_type=document_type, similarity_score=None,
                   industry_standards={}, available=False,
                   note="Comparative analysis unavailable")


@dataclass(frozen=True)
class EnhancedScore(Serializable):
    """Document-level score synthesized from the sub-analyses"""
    overall_score: float
    breakdown: Mapping[str, Any]
    recommendations: Tuple[str, ...] = ()
    alerts: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DocumentAnalysis(Serializable):
    """Complete document heuristic analysis"""
    sentiment: SentimentResult
    entities: ExtractedEntities
    risk_factors: RiskFactorAssessment
    counterparty_risk: CounterpartyRiskScore
    legal_clauses: Tuple[ClauseDetection, ...]
    comparative: ComparativeAnalysis
    enhanced_score: EnhancedScore
    timestamp: str = field(default_factory=utc_timestamp)
    fallback_operations: Tuple[str, ...] = ()
    degraded: bool = False

    @classmethod
    def fallback(cls, document_type: str = "contract") -> "DocumentAnalysis":
        """Degraded variant used when the analysis cannot be synthesized"""
        return cls(
            sentiment=SentimentResult.neutral(),
            entities=ExtractedEntities(),
            risk_factors=RiskFactorAssessment.fallback(),
            counterparty_risk=CounterpartyRiskScore.fallback(),
            legal_clauses=(),
            comparative=ComparativeAnalysis.unavailable(document_type),
            enhanced_score=EnhancedScore(
                overall_score=70,
                breakdown={},
                recommendations=(MANUAL_REVIEW,),
                alerts=("Automated analysis partially failed",)
            ),
            degraded=True
        )


class DocumentHeuristicAnalyzer:
    """Keyword- and pattern-driven analysis of document text"""

    BASE_SCORE = 75
    NEGATIVE_SENTIMENT_PENALTY = 10
    HIGH_RISK_PENALTY = 15
    MIN_EXPECTED_CLAUSES = 3

    def __init__(self, taxonomy: Optional[DocumentTaxonomy] = None,
                 bands: Optional[RiskBands] = None,
                 entity_extractor: Optional[EntityExtractor] = None):
        self.taxonomy = taxonomy or DocumentTaxonomy()
        self.bands = bands or RiskBands()
        self.entity_extractor = entity_extractor or EntityExtractor()

        self.tokenizer = RegexpTokenizer(r"\w+")
        self.stemmer = PorterStemmer()
        self._positive_stems = frozenset(self.stemmer.stem(word) for word in self.taxonomy.positive_words)
        self._negative_stems = frozenset(self.stemmer.stem(word) for word in self.taxonomy.negative_words)
        self._clause_patterns = compile_patterns(self.taxonomy.clause_patterns)

    async def analyze(self, text: str, document_type: str = "contract") -> DocumentAnalysis:
        """Run every sub-analysis, substituting fallbacks for any that fail"""
        fallbacks: List[str] = []

        sentiment = self._guarded("sentiment", fallbacks, SentimentResult.neutral,
                                  self.analyze_sentiment, text)
        entities = self._guarded("entities", fallbacks, ExtractedEntities,
                                 self.extract_entities, text)
        risk_factors = self._guarded("risk_factors", fallbacks, RiskFactorAssessment.fallback,
                                     self.assess_risk_factors, text)
        counterparty = self._guarded("counterparty_risk", fallbacks, CounterpartyRiskScore.fallback,
                                     self.analyze_counterparty_risk, text)
        clauses = self._guarded("legal_clauses", fallbacks, list,
                                self.detect_legal_clauses, text)
        comparative = self._guarded("comparative", fallbacks,
                                    lambda: ComparativeAnalysis.unavailable(document_type),
                                    self.compare_with_corpus, text, document_type)

        try:
            enhanced = self.synthesize_score(sentiment, risk_factors, counterparty, clauses)
        except Exception as e:
            logger.error(f"Enhanced score synthesis failed: {e}")
            return DocumentAnalysis.fallback(document_type)

        if fallbacks:
            logger.warning(f"Document analysis used fallbacks for: {', '.join(fallbacks)}")

        return DocumentAnalysis(
            sentiment=sentiment,
            entities=entities,
            risk_factors=risk_factors,
            counterparty_risk=counterparty,
            legal_clauses=tuple(clauses),
            comparative=comparative,
            enhanced_score=enhanced,
            fallback_operations=tuple(fallbacks)
        )

    def _guarded(self, name: str, fallbacks: List[str], fallback: Callable[[], Any],
                 operation: Callable[..., Any], *args) -> Any:
        try:
            return operation(*args)
        except Exception as e:
            logger.error(f"Document {name} analysis failed: {e}")
            fallbacks.append(name)
            return fallback()

    def analyze_sentiment(self, text: str) -> SentimentResult:
        """Positive minus negative stem hits, normalized by token count"""
        tokens = self.tokenizer.tokenize(text.lower())
        if not tokens:
            return SentimentResult.neutral()

        stems = [self.stemmer.stem(token) for token in tokens]
        positive_count = sum(1 for stem in stems if stem in self._positive_stems)
        negative_count = sum(1 for stem in stems if stem in self._negative_stems)

        score = (positive_count - negative_count) / len(tokens)
        if score > 0.01:
            classification = "positive"
        elif score < -0.01:
            classification = "negative"
        else:
            classification = "neutral"

        return SentimentResult(
            score=score,
            classification=classification,
            positive_count=positive_count,
            negative_count=negative_count,
            confidence=abs(score)
        )

    def extract_entities(self, text: str) -> ExtractedEntities:
        return self.entity_extractor.extract(text)

    def assess_risk_factors(self, text: str) -> RiskFactorAssessment:
        """Bucket risk keywords and derive the overall severity"""
        buckets = scan(text, self.taxonomy.risk_keywords, radius=self.taxonomy.risk_context_radius)
        high = tuple(buckets.get("high", ()))
        medium = tuple(buckets.get("medium", ()))
        low = tuple(buckets.get("low", ()))

        if len(high) > 2:
            overall = "high"
        elif len(medium) > 3 or len(high) > 0:
            overall = "medium"
        else:
            overall = "low"

        return RiskFactorAssessment(high=high, medium=medium, low=low, overall=overall)

    def analyze_counterparty_risk(self, text: str) -> CounterpartyRiskScore:
        """Deduct points for missing disclosure, identity and compliance signals"""
        taxonomy = self.taxonomy
        score = 100.0
        deductions = []

        def deduct(category: str, points: float, reason: str):
            nonlocal score
            score -= points
            deductions.append(Deduction(category=category, points_deducted=points,
                                        reason=reason, source=SOURCE_NAME))

        if len(matching_terms(text, taxonomy.financial_indicators)) < 3:
            deduct("Financial Disclosure", taxonomy.disclosure_points, "Limited financial information provided")

        identity = taxonomy.counterparty_factors.get("identity", ())
        if len(matching_terms(text, identity)) < 2:
            deduct("Counterparty Identity", taxonomy.identity_points, "Insufficient counterparty identification details")

        if matching_terms(text, taxonomy.key_person_phrases):
            deduct("Operational Risk", taxonomy.key_person_points, "Key person dependency identified")

        if not matching_terms(text, taxonomy.compliance_terms):
            deduct("Compliance Risk", taxonomy.compliance_points, "No compliance or regulatory framework mentioned")

        score = max(score, 0.0)
        return CounterpartyRiskScore(
            score=score,
            risk_level=self.bands.get_risk_level(score),
            deductions=tuple(deductions)
        )

    def detect_legal_clauses(self, text: str) -> List[ClauseDetection]:
        """Standard clause types present in the text, in declaration order"""
        hits = search_patterns(text, self._clause_patterns, radius=self.taxonomy.clause_context_radius)
        return [
            ClauseDetection(
                clause_type=clause_type,
                context=context,
                importance=self.assess_clause_importance(clause_type)
            )
            for clause_type, context in hits.items()
        ]

    def assess_clause_importance(self, clause_type: str) -> str:
        return self.taxonomy.clause_importance.get(clause_type, "low")

    def compare_with_corpus(self, text: str, document_type: str) -> ComparativeAnalysis:
        """Placeholder comparison driven by fixed trigger phrases"""
        unusual = [note for phrase, note in self.taxonomy.unusual_clause_triggers.items() if phrase in text]
        common = [note for phrase, note in self.taxonomy.common_clause_triggers.items() if phrase in text]
        return ComparativeAnalysis(
            document_type=document_type,
            common_clauses=tuple(common),
            unusual_clauses=tuple(unusual)
        )

    def synthesize_score(self, sentiment: SentimentResult,
                         risk_factors: RiskFactorAssessment,
                         counterparty: CounterpartyRiskScore,
                         clauses: List[ClauseDetection]) -> EnhancedScore:
        """Combine sub-analyses into the document-level score and advice"""
        overall_score = self.BASE_SCORE
        recommendations = []
        alerts = []

        if sentiment.classification == "negative":
            overall_score -= self.NEGATIVE_SENTIMENT_PENALTY
            alerts.append("Negative document sentiment detected")

        if risk_factors.overall == "high":
            overall_score -= self.HIGH_RISK_PENALTY
            alerts.append("High risk factors identified")

        if counterparty.deductions:
            recommendations.append("Request additional counterparty documentation")

        if len(clauses) < self.MIN_EXPECTED_CLAUSES:
            recommendations.append("Consider adding standard legal protective clauses")

        recommendations.extend(counterparty.notes)

        return EnhancedScore(
            overall_score=overall_score,
            breakdown={
                "sentiment": sentiment.score,
                "risk_level": risk_factors.overall,
                "counterparty_score": counterparty.score,
                "clause_compliance": len(clauses)
            },
            recommendations=tuple(recommendations),
            alerts=tuple(alerts)
        )
