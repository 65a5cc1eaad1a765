"""
Risk Models Package

Configuration tables, shared result types and the composite risk aggregator.
"""

from .risk_config import (
    RiskLevel,
    RiskBands,
    DocumentTaxonomy,
    LegalTaxonomy,
    IndustryProfile,
    FinancialRiskConfig,
    AggregationWeights,
    ProviderSettings,
    RiskEngineConfig
)

from .results import (
    InvalidAnalysisRequest,
    AnalysisRequest,
    SourceResult,
    Deduction,
    KeywordMatch,
    ClauseDetection,
    RiskFactor,
    CompositeRiskScore,
    RecommendationSet,
    ExecutiveSummary,
    ReportMetadata,
    RiskReport
)

from .risk_aggregator import (
    AnalysisSources,
    RiskAggregator,
    round_half_up
)

__all__ = [
    # Configuration classes
    "RiskLevel",
    "RiskBands",
    "DocumentTaxonomy",
    "LegalTaxonomy",
    "IndustryProfile",
    "FinancialRiskConfig",
    "AggregationWeights",
    "ProviderSettings",
    "RiskEngineConfig",

    # Result classes
    "InvalidAnalysisRequest",
    "AnalysisRequest",
    "SourceResult",
    "Deduction",
    "KeywordMatch",
    "ClauseDetection",
    "RiskFactor",
    "CompositeRiskScore",
    "RecommendationSet",
    "ExecutiveSummary",
    "ReportMetadata",
    "RiskReport",

    # Aggregation classes
    "AnalysisSources",
    "RiskAggregator",
    "round_half_up"
]
