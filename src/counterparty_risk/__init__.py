"""
Counterparty Risk Assessment

Multi-source weighted counterparty risk scoring for contract documents.

Main Components:
- CounterpartyRiskEngine: Main orchestration engine
- DocumentHeuristicAnalyzer: Keyword, sentiment and clause heuristics
- LegalPatternAnalyzer: Contract structure, enforcement and precedent search
- FinancialRiskAnalyzer: Company, market, industry and macro risk
- RiskAggregator: Weighted-deduction composite score and recommendations

Usage:
    from counterparty_risk import create_risk_engine

    async with create_risk_engine() as engine:
        report = await engine.aggregate_risk({
            "document_text": "This agreement between ...",
            "counterparty": "IBM",
            "industry": "technology"
        })
        print(report.risk.score, report.risk.risk_level.value)
"""

from .risk_engine import (
    CounterpartyRiskEngine,
    create_risk_engine
)

from .analyzers import (
    DocumentHeuristicAnalyzer,
    DocumentAnalysis,
    LegalPatternAnalyzer,
    LegalAnalysis,
    FinancialRiskAnalyzer,
    FinancialRiskAssessment
)

from .models import (
    AnalysisRequest,
    InvalidAnalysisRequest,
    SourceResult,
    RiskReport,
    CompositeRiskScore,
    RiskAggregator,
    RiskEngineConfig,
    ProviderSettings,
    RiskLevel
)

__version__ = "1.0.0"
__author__ = "ContractSense Team"

__all__ = [
    "CounterpartyRiskEngine",
    "create_risk_engine",
    "DocumentHeuristicAnalyzer",
    "DocumentAnalysis",
    "LegalPatternAnalyzer",
    "LegalAnalysis",
    "FinancialRiskAnalyzer",
    "FinancialRiskAssessment",
    "AnalysisRequest",
    "InvalidAnalysisRequest",
    "SourceResult",
    "RiskReport",
    "CompositeRiskScore",
    "RiskAggregator",
    "RiskEngineConfig",
    "ProviderSettings",
    "RiskLevel"
]
