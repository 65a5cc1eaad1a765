"""
Risk Aggregator Module

Combines the analyzer outputs of one request into the composite
counterparty risk score and the surrounding report:
- Weighted-deduction composite score and risk level
- Confidence from the share of sources that produced real data
- Cross-source risk factors
- Categorized recommendations and an executive summary

Failed sources are skipped in scoring; degraded ones are scored but do
not count toward confidence.
"""

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from .results import (
    AnalysisRequest, CompositeRiskScore, Deduction, ExecutiveSummary, RecommendationSet,
    ReportMetadata, RiskFactor, RiskReport, SourceResult, utc_timestamp
)
from .risk_config import RiskEngineConfig, RiskLevel

if TYPE_CHECKING:
    from ..analyzers.document_analyzer import DocumentAnalysis
    from ..analyzers.financial_analyzer import FinancialRiskAssessment
    from ..analyzers.legal_analyzer import LegalAnalysis

logger = logging.getLogger(__name__)

MANUAL_REVIEW = "Manual review recommended"

MONITORING_RECOMMENDATIONS = (
    "Regular review of counterparty financial condition",
    "Monitor compliance with contract terms",
    "Track industry and regulatory changes",
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity"""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class AnalysisSources:
    """Settled analyzer outputs for one request; None means not requested"""
    document: SourceResult
    legal: SourceResult
    financial: Optional[SourceResult] = None
    translation: Optional[SourceResult] = None

    def named(self) -> Dict[str, SourceResult]:
        sources = {"document_analysis": self.document, "legal_analysis": self.legal}
        if self.financial is not None:
            sources["financial_risk"] = self.financial
        if self.translation is not None:
            sources["translation"] = self.translation
        return sources

    def failed(self) -> Dict[str, str]:
        return {name: result.error for name, result in self.named().items() if not result.ok}

    @property
    def document_value(self) -> Optional["DocumentAnalysis"]:
        return self.document.unwrap_or(None)

    @property
    def legal_value(self) -> Optional["LegalAnalysis"]:
        return self.legal.unwrap_or(None)

    @property
    def financial_value(self) -> Optional["FinancialRiskAssessment"]:
        return self.financial.unwrap_or(None) if self.financial is not None else None

    def incomplete(self) -> bool:
        """True when any requested structured source failed or fell back"""
        structured = [self.document, self.legal]
        if self.financial is not None:
            structured.append(self.financial)
        return any(not result.ok or getattr(result.value, "degraded", False) for result in structured)


class RiskAggregator:
    """Aggregates analyzer outputs into a composite counterparty risk score"""

    def __init__(self, config: Optional[RiskEngineConfig] = None):
        self.config = config or RiskEngineConfig()

    @property
    def weights(self):
        return self.config.weights

    def aggregate(self, sources: AnalysisSources) -> CompositeRiskScore:
        """Weighted-deduction composite score over the successful sources"""
        weights = self.weights
        total = 100.0
        deductions: List[Deduction] = []

        document = sources.document_value
        financial = sources.financial_value
        legal = sources.legal_value

        if document is not None:
            counterparty = document.counterparty_risk
            total -= (100 - counterparty.score) * weights.document
            deductions.extend(d.retagged("Document Analysis", weights.document)
                              for d in counterparty.deductions)

        if financial is not None:
            total -= (100 - financial.overall_score) * weights.financial
            deductions.extend(d.retagged("Financial Analysis", weights.financial)
                              for d in financial.deductions)

        if legal is not None:
            patterns = legal.patterns
            completeness = patterns.contract_structure.completeness
            if completeness < weights.structure_floor:
                points = (weights.structure_floor - completeness) * weights.legal
                total -= points
                deductions.append(Deduction(
                    category="Contract Structure",
                    points_deducted=points,
                    reason="Incomplete contract structure elements",
                    source="Legal Analysis",
                    weight=weights.legal
                ))

            if patterns.risk_distribution.type == "unilateral":
                total -= weights.unilateral_penalty
                deductions.append(Deduction(
                    category="Risk Distribution",
                    points_deducted=weights.unilateral_penalty,
                    reason="Unbalanced risk allocation detected",
                    source="Legal Analysis",
                    weight=weights.legal
                ))

        if document is not None and document.sentiment.classification == "negative":
            total -= weights.sentiment_penalty
            deductions.append(Deduction(
                category="Document Sentiment",
                points_deducted=weights.sentiment_penalty,
                reason="Negative sentiment in document language",
                source="NLP Analysis",
                weight=weights.sentiment
            ))

        score = max(round_half_up(total), 0)
        logger.debug(f"Composite score {score} from {len(deductions)} deductions")

        return CompositeRiskScore(
            score=score,
            risk_level=self.config.bands.get_risk_level(score),
            deductions=tuple(deductions),
            confidence=self.calculate_confidence(sources),
            factors=tuple(self.identify_risk_factors(sources))
        )

    def calculate_confidence(self, sources: AnalysisSources) -> int:
        """Share of sources with real data blended with sentiment confidence"""
        document = sources.document_value
        legal = sources.legal_value
        financial = sources.financial_value

        available = 0
        if document is not None and not document.degraded:
            available += 1
        if legal is not None and not legal.degraded:
            available += 1
        if financial is not None and financial.breakdown.get("financial") == "analyzed":
            available += 1

        sentiment_confidence = document.sentiment.confidence if document is not None else 0.0
        ratio = available / 3
        return round_half_up(
            (ratio * self.weights.source_ratio_weight
             + sentiment_confidence * self.weights.sentiment_confidence_weight) * 100
        )

    def identify_risk_factors(self, sources: AnalysisSources) -> List[RiskFactor]:
        factors = []

        document = sources.document_value
        if document is not None:
            for level, matches in document.risk_factors.buckets().items():
                if matches:
                    factors.append(RiskFactor(
                        category="Document Risk",
                        level=level,
                        description=f"{len(matches)} {level}-risk terms identified",
                        details=tuple(match.keyword for match in matches)
                    ))

        financial = sources.financial_value
        if financial is not None:
            for category in dict.fromkeys(d.category for d in financial.deductions):
                factors.append(RiskFactor(
                    category="Financial Risk",
                    level="identified",
                    description=category
                ))

        legal = sources.legal_value
        if legal is not None:
            structure = legal.patterns.contract_structure
            if structure.score == "poor":
                factors.append(RiskFactor(
                    category="Legal Structure",
                    level="high",
                    description="Incomplete contract elements",
                    details=structure.missing_elements
                ))

        return factors

    def build_recommendations(self, sources: AnalysisSources) -> RecommendationSet:
        immediate: List[str] = []
        short_term: List[str] = []
        long_term: List[str] = []

        document = sources.document_value
        if document is not None:
            immediate.extend(document.enhanced_score.recommendations)

        financial = sources.financial_value
        if financial is not None:
            short_term.extend(financial.recommendations)

        legal = sources.legal_value
        if legal is not None:
            immediate.extend(legal.patterns.enforcement_mechanisms.recommendations)
            clauses = legal.patterns.industry_compliance.recommended_clauses
            if clauses:
                long_term.append(f"Consider adding industry-specific clauses: {', '.join(clauses)}")

        if sources.incomplete():
            immediate.append(MANUAL_REVIEW)

        return RecommendationSet(
            immediate=tuple(immediate),
            short_term=tuple(short_term),
            long_term=tuple(long_term),
            monitoring=MONITORING_RECOMMENDATIONS
        )

    def build_executive_summary(self, sources: AnalysisSources,
                                risk: CompositeRiskScore) -> ExecutiveSummary:
        key_findings = []
        concerns = []
        strengths = []
        next_steps = []

        document = sources.document_value
        if document is not None:
            if document.risk_factors.overall == "high":
                concerns.append("High-risk legal terms identified in document")
            if len(document.legal_clauses) > 5:
                strengths.append("Comprehensive legal clause coverage")

        financial = sources.financial_value
        if financial is not None:
            if financial.risk_level == RiskLevel.HIGH:
                concerns.append("Elevated financial risk indicators")
            elif financial.risk_level == RiskLevel.LOW:
                strengths.append("Strong financial position indicated")

        legal = sources.legal_value
        if legal is not None and legal.precedents:
            key_findings.append("Relevant legal precedents identified for reference")

        if sources.incomplete():
            concerns.append("Automated analysis incomplete - some data sources unavailable")

        if risk.risk_level == RiskLevel.HIGH:
            next_steps.append("Conduct detailed due diligence before proceeding")
            next_steps.append("Consider additional risk mitigation measures")
        next_steps.append("Review and negotiate key risk allocation terms")
        next_steps.append("Establish appropriate monitoring and reporting mechanisms")

        return ExecutiveSummary(
            overall_risk=risk.risk_level,
            score=risk.score,
            key_findings=tuple(key_findings),
            primary_concerns=tuple(concerns),
            strengths=tuple(strengths),
            next_steps=tuple(next_steps)
        )

    def services_used(self, sources: AnalysisSources) -> Tuple[str, ...]:
        labels = {
            "document_analysis": "Enhanced NLP Analysis",
            "legal_analysis": "Legal Database Search",
            "financial_risk": "Financial Risk Assessment",
            "translation": "Translation Service",
        }
        return tuple(labels[name] for name, result in sources.named().items() if result.ok)

    def build_report(self, request: AnalysisRequest, sources: AnalysisSources,
                     processing_time: float = 0.0) -> RiskReport:
        """Assemble the complete response for one request"""
        risk = self.aggregate(sources)
        failed: Dict[str, Any] = sources.failed()
        if failed:
            logger.warning(f"Risk report built without: {', '.join(failed)}")

        return RiskReport(
            request=request,
            document_analysis=sources.document,
            legal_analysis=sources.legal,
            financial_risk=sources.financial,
            translation=sources.translation,
            risk=risk,
            recommendations=self.build_recommendations(sources),
            executive_summary=self.build_executive_summary(sources, risk),
            metadata=ReportMetadata(
                analysis_timestamp=utc_timestamp(),
                services_used=self.services_used(sources),
                failed_sources=failed,
                processing_time=round(processing_time, 3)
            )
        )
