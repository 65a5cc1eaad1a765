"""
Risk Analyzers Package

Independent analyzers whose outputs feed the composite risk score:
- Document heuristics (sentiment, risk keywords, counterparty disclosure, clauses)
- Legal patterns and precedents
- Financial, market and macroeconomic risk
"""

from .document_analyzer import (
    DocumentHeuristicAnalyzer,
    DocumentAnalysis,
    SentimentResult,
    RiskFactorAssessment,
    CounterpartyRiskScore,
    ComparativeAnalysis,
    EnhancedScore
)

from .legal_analyzer import (
    LegalPatternAnalyzer,
    LegalAnalysis,
    LegalPatterns,
    ContractStructure,
    RiskDistribution,
    EnforcementAnalysis,
    IndustryCompliance
)

from .financial_analyzer import (
    FinancialRiskAnalyzer,
    FinancialRiskAssessment,
    IndustryTrends
)

__all__ = [
    "DocumentHeuristicAnalyzer",
    "DocumentAnalysis",
    "SentimentResult",
    "RiskFactorAssessment",
    "CounterpartyRiskScore",
    "ComparativeAnalysis",
    "EnhancedScore",
    "LegalPatternAnalyzer",
    "LegalAnalysis",
    "LegalPatterns",
    "ContractStructure",
    "RiskDistribution",
    "EnforcementAnalysis",
    "IndustryCompliance",
    "FinancialRiskAnalyzer",
    "FinancialRiskAssessment",
    "IndustryTrends"
]
