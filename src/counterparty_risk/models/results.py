"""
Result Models

Data model shared by the analyzers, the orchestrator and the aggregator:
- AnalysisRequest: validated input for one analysis run
- SourceResult: tagged success/failure wrapper around one analyzer's output
- Deduction, CompositeRiskScore, RecommendationSet, ExecutiveSummary
- RiskReport: the complete response returned to callers

Everything here is immutable once constructed.
"""

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Generic, Iterable, List, Mapping, Optional, Tuple, TypeVar

from .risk_config import RiskLevel

T = TypeVar("T")


class InvalidAnalysisRequest(ValueError):
    """Raised when a request cannot be analyzed at all"""


def to_jsonable(value: Any) -> Any:
    """Recursively convert result objects into JSON-friendly structures"""
    if hasattr(value, "to_dict") and not isinstance(value, type):
        return value.to_dict()
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, BaseException):
        return str(value)
    return value


def unique_strings(items: Iterable[Optional[str]]) -> Tuple[str, ...]:
    """Deduplicate while keeping first-seen order, dropping empty entries"""
    return tuple(item for item in dict.fromkeys(items) if item)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class Serializable:
    """Adds a dataclass-driven to_dict()"""

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: to_jsonable(getattr(self, f.name)) for f in fields(self)}


# Request field aliases accepted from HTTP-style payloads
_PAYLOAD_ALIASES = {
    "documentText": "document_text",
    "documentType": "document_type",
    "companyName": "counterparty",
    "company_name": "counterparty",
    "targetLanguage": "target_language",
    "sourceLanguage": "source_language",
    "additionalData": "additional_data",
}


@dataclass(frozen=True)
class AnalysisRequest(Serializable):
    """Validated input for one composite risk analysis"""
    document_text: str
    document_type: str = "contract"
    counterparty: Optional[str] = None
    industry: str = "default"
    target_language: Optional[str] = None
    source_language: str = "en"
    additional_data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.document_text, str) or not self.document_text.strip():
            raise InvalidAnalysisRequest("Document text is required")
        for name in ("document_type", "industry", "target_language", "source_language"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise InvalidAnalysisRequest(f"{name} must be a string, got {type(value).__name__}")
        if self.additional_data is not None and not isinstance(self.additional_data, Mapping):
            raise InvalidAnalysisRequest("additional_data must be a mapping")

        counterparty = self.counterparty.strip() if isinstance(self.counterparty, str) else None
        object.__setattr__(self, "counterparty", counterparty or None)
        object.__setattr__(self, "target_language", self.target_language or None)
        object.__setattr__(self, "document_type", self.document_type or "contract")
        object.__setattr__(self, "industry", (self.industry or "default").strip().lower())
        object.__setattr__(self, "additional_data", MappingProxyType(dict(self.additional_data or {})))

    def normalized_industry(self, known: Iterable[str]) -> str:
        """Industry tag, or the default bucket when unrecognised"""
        return self.industry if self.industry in set(known) else "default"

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AnalysisRequest":
        """Build a request from a snake_case or camelCase payload"""
        if not isinstance(payload, Mapping):
            raise InvalidAnalysisRequest("Request payload must be a mapping")

        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in payload.items():
            name = _PAYLOAD_ALIASES.get(key, key)
            if name in known and value is not None:
                kwargs[name] = value

        if "document_text" not in kwargs:
            raise InvalidAnalysisRequest("Document text is required")
        return cls(**kwargs)


@dataclass(frozen=True)
class SourceResult(Generic[T]):
    """Outcome of one analyzer invocation: success with a value, or failure with an error"""
    status: str
    value: Optional[T] = None
    error: Optional[str] = None

    SUCCESS = "success"
    FAILURE = "failure"

    @classmethod
    def success(cls, value: T) -> "SourceResult[T]":
        return cls(status=cls.SUCCESS, value=value)

    @classmethod
    def failure(cls, error: Any) -> "SourceResult[T]":
        if isinstance(error, BaseException):
            message = f"{type(error).__name__}: {error}"
        else:
            message = str(error)
        return cls(status=cls.FAILURE, error=message)

    @property
    def ok(self) -> bool:
        return self.status == self.SUCCESS

    def unwrap_or(self, default: Optional[T] = None) -> Optional[T]:
        return self.value if self.ok else default

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"status": self.status, "value": to_jsonable(self.value)}
        return {"status": self.status, "error": self.error}


@dataclass(frozen=True)
class Deduction(Serializable):
    """A named, weighted point subtraction with a human-readable justification"""
    category: str
    points_deducted: float
    reason: str
    source: str = ""
    weight: float = 1.0

    def __post_init__(self):
        if self.points_deducted < 0:
            raise ValueError(f"Deduction points must be non-negative: {self.points_deducted}")
        if not 0.0 <= self.weight <= 1.0:
            raise ValueError(f"Deduction weight must lie in [0, 1]: {self.weight}")

    def retagged(self, source: str, weight: float) -> "Deduction":
        return Deduction(
            category=self.category,
            points_deducted=self.points_deducted,
            reason=self.reason,
            source=source,
            weight=weight,
        )


@dataclass(frozen=True)
class KeywordMatch(Serializable):
    """Risk keyword hit with its surrounding text"""
    keyword: str
    context: str


@dataclass(frozen=True)
class ClauseDetection(Serializable):
    """Legal clause found in the document"""
    clause_type: str
    context: str
    importance: str


@dataclass(frozen=True)
class RiskFactor(Serializable):
    """Key risk factor surfaced across analyses"""
    category: str
    level: str
    description: str
    details: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CompositeRiskScore(Serializable):
    """Final weighted risk score for one request"""
    score: int
    risk_level: RiskLevel
    deductions: Tuple[Deduction, ...]
    confidence: int
    factors: Tuple[RiskFactor, ...] = ()
    max_score: int = 100
    methodology: str = "Enhanced multi-source risk assessment"


@dataclass(frozen=True)
class RecommendationSet(Serializable):
    """Categorized, deduplicated recommendations"""
    immediate: Tuple[str, ...] = ()
    short_term: Tuple[str, ...] = ()
    long_term: Tuple[str, ...] = ()
    monitoring: Tuple[str, ...] = ()

    def __post_init__(self):
        for name in ("immediate", "short_term", "long_term", "monitoring"):
            object.__setattr__(self, name, unique_strings(getattr(self, name)))

    def all(self) -> List[str]:
        return [*self.immediate, *self.short_term, *self.long_term, *self.monitoring]


@dataclass(frozen=True)
class ExecutiveSummary(Serializable):
    """Qualitative summary of the composite assessment"""
    overall_risk: RiskLevel
    score: int
    key_findings: Tuple[str, ...] = ()
    primary_concerns: Tuple[str, ...] = ()
    strengths: Tuple[str, ...] = ()
    next_steps: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ReportMetadata(Serializable):
    """Bookkeeping about one analysis run"""
    analysis_timestamp: str
    services_used: Tuple[str, ...]
    failed_sources: Mapping[str, str]
    processing_time: float


@dataclass(frozen=True)
class RiskReport(Serializable):
    """Complete response of the composite risk analysis"""
    request: AnalysisRequest
    document_analysis: SourceResult
    legal_analysis: SourceResult
    financial_risk: Optional[SourceResult]
    translation: Optional[SourceResult]
    risk: CompositeRiskScore
    recommendations: RecommendationSet
    executive_summary: ExecutiveSummary
    metadata: ReportMetadata

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        # Echo only request metadata, not the full document text
        result["request"] = {
            "document_type": self.request.document_type,
            "counterparty": self.request.counterparty,
            "industry": self.request.industry,
            "target_language": self.request.target_language,
        }
        return result
