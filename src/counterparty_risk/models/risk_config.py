"""
Risk Configuration Module

This module defines the fixed tables driving every heuristic analyzer:
- Keyword lists and clause patterns for document analysis
- Structure, enforcement and industry taxonomies for legal analysis
- Thresholds, deduction points and industry profiles for financial analysis
- Aggregation weights and score banding

All tables are immutable and injected into analyzers at construction, so
different taxonomies can be used side by side.
"""

import json
import os
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple


def _frozen(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    """Read-only view with nested lists turned into tuples"""
    frozen = {}
    for key, value in mapping.items():
        if isinstance(value, Mapping):
            frozen[key] = _frozen(value)
        elif isinstance(value, (list, tuple)):
            frozen[key] = tuple(value)
        else:
            frozen[key] = value
    return MappingProxyType(frozen)


def _thawed(value: Any) -> Any:
    """Plain JSON-friendly copy of a frozen table"""
    if isinstance(value, Mapping):
        return {key: _thawed(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thawed(item) for item in value]
    if isinstance(value, IndustryProfile):
        return value.to_dict()
    return value


class RiskLevel(Enum):
    """Risk band for any 0-100 score"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class RiskBands:
    """Score thresholds for banding (higher score = lower risk)"""
    low: float = 80.0
    medium: float = 60.0

    def get_risk_level(self, score: float) -> RiskLevel:
        """Convert numerical score to risk level"""
        if score >= self.low:
            return RiskLevel.LOW
        elif score >= self.medium:
            return RiskLevel.MEDIUM
        else:
            return RiskLevel.HIGH


@dataclass(frozen=True)
class DocumentTaxonomy:
    """Keyword and clause tables for the document heuristic analyzer"""

    risk_keywords: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: _frozen({
        "high": ["penalty", "termination", "breach", "liquidated damages", "forfeiture",
                 "default", "bankruptcy", "insolvency"],
        "medium": ["liability", "indemnification", "guarantee", "security", "collateral",
                   "warranty", "representation"],
        "low": ["notice", "delivery", "payment terms", "schedule", "ordinary course"],
    }))

    financial_indicators: Tuple[str, ...] = (
        "credit rating", "financial statements", "audited", "revenue", "profit", "loss",
        "debt", "equity", "cash flow", "working capital", "liquidity",
    )

    counterparty_factors: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: _frozen({
        "identity": ["company name", "registration", "jurisdiction", "address"],
        "financial": ["financial condition", "creditworthiness", "solvency", "capital"],
        "operational": ["business operations", "key personnel", "market position", "reputation"],
        "legal": ["compliance", "regulatory", "litigation", "sanctions"],
    }))

    key_person_phrases: Tuple[str, ...] = ("key man", "key person")
    compliance_terms: Tuple[str, ...] = ("compliance", "regulatory", "law", "regulation")

    # Counterparty sub-score deductions
    disclosure_points: float = 15
    identity_points: float = 20
    key_person_points: float = 10
    compliance_points: float = 12

    positive_words: Tuple[str, ...] = (
        "agree", "benefit", "advantage", "profit", "gain", "success", "favorable", "positive",
    )
    negative_words: Tuple[str, ...] = (
        "breach", "penalty", "risk", "loss", "damage", "harm", "unfavorable", "negative",
    )

    # Declaration order is detection order
    clause_patterns: Mapping[str, str] = field(default_factory=lambda: _frozen({
        "Force Majeure": r"force majeure|act of god|unforeseeable circumstances",
        "Termination": r"termination|terminate|end this agreement",
        "Liability": r"liability|liable|responsible for damages",
        "Indemnification": r"indemnify|indemnification|hold harmless",
        "Confidentiality": r"confidential|non-disclosure|proprietary information",
        "Governing Law": r"governing law|jurisdiction|courts of",
        "Assignment": r"assignment|assign|transfer",
        "Severability": r"severability|severable|invalid provision",
    }))

    clause_importance: Mapping[str, str] = field(default_factory=lambda: _frozen({
        "Liability": "high",
        "Termination": "high",
        "Indemnification": "high",
        "Force Majeure": "medium",
        "Confidentiality": "medium",
        "Governing Law": "medium",
    }))

    unusual_clause_triggers: Mapping[str, str] = field(default_factory=lambda: _frozen({
        "liquidated damages": "Liquidated damages clause - review market standards",
    }))
    common_clause_triggers: Mapping[str, str] = field(default_factory=lambda: _frozen({
        "non-compete": "Non-compete clause - standard for this document type",
    }))

    risk_context_radius: int = 50
    clause_context_radius: int = 100


@dataclass(frozen=True)
class LegalTaxonomy:
    """Structure, enforcement and industry tables for the legal pattern analyzer"""

    structure_indicators: Mapping[str, str] = field(default_factory=lambda: _frozen({
        "parties": r"party|parties|between.*and",
        "consideration": r"consideration|payment|compensation|value",
        "obligations": r"shall|must|will|obligation|duty|responsibility",
        "termination": r"terminate|termination|end|expire|expiration",
        "governing_law": r"governing law|jurisdiction|applicable law",
        "signatures": r"signature|signed|execute|execution",
    }))

    # Priority order for ties: earlier categories win
    risk_distribution_patterns: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: _frozen({
        "unilateral": [r"one party.*liable", r"sole responsibility", r"exclusively liable"],
        "mutual": [r"mutual.*liable", r"both parties.*responsible", r"shared liability"],
        "balanced": [r"proportionate", r"reasonable allocation", r"equitable distribution"],
    }))

    risk_distribution_recommendations: Mapping[str, str] = field(default_factory=lambda: _frozen({
        "unilateral": "Consider balancing risk allocation to ensure fairness",
        "mutual": "Good balance, ensure proportionality to capabilities",
        "balanced": "Well-structured risk allocation",
        "unclear": "Clarify risk allocation terms for better enforceability",
    }))

    enforcement_patterns: Mapping[str, str] = field(default_factory=lambda: _frozen({
        "arbitration": r"arbitration|arbitrator|arbitral",
        "mediation": r"mediation|mediator",
        "litigation": r"court|lawsuit|litigation",
        "liquidated_damages": r"liquidated damages",
        "specific_performance": r"specific performance",
        "injunctive_relief": r"injunction|injunctive relief",
    }))

    # Iteration order matters: the last matching industry wins
    industry_patterns: Mapping[str, str] = field(default_factory=lambda: _frozen({
        "financial": r"banking|financial|securities|investment|credit",
        "healthcare": r"healthcare|medical|patient|hipaa|phi",
        "technology": r"software|technology|data|privacy|gdpr",
        "manufacturing": r"manufacturing|production|supply|materials",
        "employment": r"employment|employee|work|labor",
    }))

    industry_requirements: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: _frozen({
        "financial": ["Anti-money laundering compliance", "Know your customer requirements",
                      "Regulatory reporting obligations"],
        "healthcare": ["HIPAA compliance for patient data", "Medical device regulations",
                       "Professional liability considerations"],
        "technology": ["Data privacy regulations (GDPR, CCPA)", "Cybersecurity requirements",
                       "Intellectual property protections"],
        "manufacturing": ["Product liability standards", "Safety regulations compliance",
                          "Environmental regulations"],
        "employment": ["Labor law compliance", "Non-discrimination requirements",
                       "Wage and hour regulations"],
        "general": ["General business law compliance", "Tax obligations", "Corporate governance"],
    }))

    recommended_clauses: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: _frozen({
        "financial": ["Regulatory compliance", "Data security", "Audit rights"],
        "healthcare": ["HIPAA compliance", "Professional standards", "Patient safety"],
        "technology": ["Data privacy", "IP protection", "Cybersecurity"],
        "manufacturing": ["Product liability", "Quality standards", "Environmental compliance"],
        "employment": ["Non-discrimination", "Confidentiality", "Non-compete"],
        "general": ["Force majeure", "Governing law", "Dispute resolution"],
    }))

    legal_terms: Tuple[str, ...] = (
        "contract", "agreement", "liability", "indemnification", "breach",
        "termination", "damages", "warranty", "representation", "covenant",
        "force majeure", "assignment", "confidentiality", "non-disclosure",
        "intellectual property", "governing law", "jurisdiction", "arbitration",
        "mediation", "remedy", "injunction", "specific performance",
    )

    mock_cases: Tuple[Mapping[str, Any], ...] = field(default_factory=lambda: (
        _frozen({
            "title": "Smith v. Johnson Industries",
            "court": "Federal District Court",
            "year": 2022,
            "relevance": 0.85,
            "summary": "Contract dispute involving liability limitations and indemnification clauses",
            "citation": "2022 U.S. Dist. LEXIS 12345",
            "key_holdings": [
                "Liability caps must be reasonable and clearly stated",
                "Indemnification clauses require mutual consideration",
            ],
        }),
        _frozen({
            "title": "Tech Corp v. Startup Inc.",
            "court": "State Supreme Court",
            "year": 2023,
            "relevance": 0.78,
            "summary": "Commercial agreement dispute regarding termination clauses",
            "citation": "2023 State LEXIS 6789",
            "key_holdings": [
                "Termination clauses must provide adequate notice period",
                "Material breach requires clear definition",
            ],
        }),
    ))


@dataclass(frozen=True)
class IndustryProfile:
    """Qualitative industry trend table entry"""
    growth: str = "medium"
    cyclicality: str = "medium"
    regulation: str = "moderate"
    competition: str = "medium"
    barriers: str = "medium"
    risk_multiplier: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "growth": self.growth,
            "cyclicality": self.cyclicality,
            "regulation": self.regulation,
            "competition": self.competition,
            "barriers": self.barriers,
            "risk_multiplier": self.risk_multiplier,
        }


def _default_industry_profiles() -> Mapping[str, IndustryProfile]:
    return MappingProxyType({
        "technology": IndustryProfile("high", "medium", "evolving", "high", "medium", 1.2),
        "healthcare": IndustryProfile("medium-high", "low", "heavy", "medium", "high", 1.1),
        "manufacturing": IndustryProfile("medium", "high", "moderate", "medium-high", "medium-high", 1.0),
        "retail": IndustryProfile("low-medium", "high", "moderate", "very high", "low", 1.3),
        "energy": IndustryProfile("volatile", "high", "heavy", "medium", "very high", 1.4),
        "financial": IndustryProfile("medium", "high", "heavy", "high", "high", 1.5),
        "startups": IndustryProfile(risk_multiplier=2.0),
        "default": IndustryProfile(),
    })


@dataclass(frozen=True)
class FinancialRiskConfig:
    """Thresholds and point deductions for financial risk scoring"""
    debt_to_equity_high: float = 1.0
    current_ratio_poor: float = 1.0
    profit_margin_floor: float = 0.0
    earnings_window: int = 4
    missed_estimates_limit: int = 3

    leverage_points: float = 15
    liquidity_points: float = 12
    profitability_points: float = 20
    earnings_points: float = 10

    volatility_limit: float = 25
    volatility_points: float = 8
    high_yield_spread_limit: float = 6.0
    high_yield_points: float = 5
    risk_environment_points: float = 10
    market_report_floor: float = 10

    industry_scale: float = 15

    gdp_growth_floor: float = 1.0
    gdp_points: float = 5
    inflation_limit: float = 4.0
    inflation_points: float = 3
    geopolitical_points: float = 8
    macro_report_floor: float = 5

    default_score: float = 70
    industry_profiles: Mapping[str, IndustryProfile] = field(default_factory=_default_industry_profiles)

    def get_industry_profile(self, industry: Optional[str]) -> IndustryProfile:
        """Industry profile lookup falling back to the default bucket"""
        if industry and industry in self.industry_profiles:
            return self.industry_profiles[industry]
        return self.industry_profiles.get("default", IndustryProfile())


@dataclass(frozen=True)
class AggregationWeights:
    """Weights for combining analyzer outputs into the composite score"""
    document: float = 0.40
    financial: float = 0.35
    legal: float = 0.25
    sentiment: float = 0.10

    structure_floor: float = 70
    unilateral_penalty: float = 10
    sentiment_penalty: float = 8

    source_ratio_weight: float = 0.70
    sentiment_confidence_weight: float = 0.30


@dataclass(frozen=True)
class ProviderSettings:
    """Credentials and endpoints for the external data providers"""
    alpha_vantage_key: str = "demo"
    alpha_vantage_url: str = "https://www.alphavantage.co/query"
    court_listener_key: Optional[str] = None
    court_listener_url: str = "https://www.courtlistener.com/api/rest/v3"
    translation_endpoints: Tuple[str, ...] = (
        "https://translate.argosopentech.com",
        "https://libretranslate.pussthecat.org",
        "https://translate.mentality.rip",
    )
    timeout_seconds: float = 10.0

    @classmethod
    def from_env(cls) -> "ProviderSettings":
        """Read provider settings from environment variables"""
        defaults = cls()
        endpoints = os.getenv("TRANSLATION_ENDPOINTS")
        return cls(
            alpha_vantage_key=os.getenv("ALPHA_VANTAGE_API_KEY", defaults.alpha_vantage_key),
            court_listener_key=os.getenv("COURT_LISTENER_API_KEY") or None,
            translation_endpoints=tuple(
                endpoint.strip() for endpoint in endpoints.split(",") if endpoint.strip()
            ) if endpoints else defaults.translation_endpoints,
            timeout_seconds=float(os.getenv("PROVIDER_TIMEOUT_SECONDS", defaults.timeout_seconds)),
        )


def _override(table: Any, overrides: Optional[Mapping[str, Any]]) -> Any:
    """Copy a frozen table with selected fields replaced"""
    if not overrides:
        return table
    values = {}
    for key, value in overrides.items():
        if not hasattr(table, key):
            raise ValueError(f"Unknown configuration field for {type(table).__name__}: {key}")
        if key == "industry_profiles":
            value = MappingProxyType({
                name: IndustryProfile(**profile) for name, profile in value.items()
            })
        elif key == "mock_cases":
            value = tuple(_frozen(case) for case in value)
        elif isinstance(value, Mapping):
            value = _frozen(value)
        elif isinstance(value, list):
            value = tuple(value)
        values[key] = value
    return replace(table, **values)


_SECTIONS = ("document", "legal", "financial", "weights", "bands")


class RiskEngineConfig:
    """Master configuration bundling every table the engine uses"""

    def __init__(self,
                 document: Optional[DocumentTaxonomy] = None,
                 legal: Optional[LegalTaxonomy] = None,
                 financial: Optional[FinancialRiskConfig] = None,
                 weights: Optional[AggregationWeights] = None,
                 bands: Optional[RiskBands] = None):
        self.document = document or DocumentTaxonomy()
        self.legal = legal or LegalTaxonomy()
        self.financial = financial or FinancialRiskConfig()
        self.weights = weights or AggregationWeights()
        self.bands = bands or RiskBands()

    @property
    def known_industries(self) -> Iterable[str]:
        return self.financial.industry_profiles.keys()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        result = {}
        for section in _SECTIONS:
            table = getattr(self, section)
            result[section] = {
                name: _thawed(getattr(table, name)) for name in table.__dataclass_fields__
            }
        return result

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "RiskEngineConfig":
        """Create configuration from dictionary, keeping defaults for missing fields"""
        return cls(
            document=_override(DocumentTaxonomy(), config_dict.get("document")),
            legal=_override(LegalTaxonomy(), config_dict.get("legal")),
            financial=_override(FinancialRiskConfig(), config_dict.get("financial")),
            weights=_override(AggregationWeights(), config_dict.get("weights")),
            bands=_override(RiskBands(), config_dict.get("bands")),
        )

    def save_to_file(self, filepath: str):
        """Save configuration to JSON file"""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load_from_file(cls, filepath: str) -> "RiskEngineConfig":
        """Load configuration from JSON file"""
        with open(filepath, 'r') as f:
            config_dict = json.load(f)
        return cls.from_dict(config_dict)
