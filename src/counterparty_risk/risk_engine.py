"""
Counterparty Risk Engine

Orchestrates the analyzers into one composite counterparty risk report:
validates the request, fans out document, legal, financial and translation
work concurrently, and aggregates whatever succeeded.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx

from .analyzers.document_analyzer import DocumentAnalysis, DocumentHeuristicAnalyzer
from .analyzers.financial_analyzer import FinancialRiskAnalyzer, FinancialRiskAssessment
from .analyzers.legal_analyzer import LegalAnalysis, LegalPatternAnalyzer
from .models.results import AnalysisRequest, InvalidAnalysisRequest, RiskReport
from .models.risk_aggregator import AnalysisSources, RiskAggregator
from .models.risk_config import ProviderSettings, RiskEngineConfig
from .providers.case_law import CourtListenerClient
from .providers.financial_data import AlphaVantageClient
from .providers.market_data import StaticMarketDataProvider
from .providers.translation import TranslationClient, TranslationResult
from .utils.concurrency import Timer, gather_settled

logger = logging.getLogger(__name__)


class CounterpartyRiskEngine:
    """
    Multi-source counterparty risk assessment

    Combines document heuristics, legal pattern analysis, financial risk and
    optional translation into a weighted composite score. Only an invalid
    request raises; every analyzer or provider failure degrades the report.
    """

    def __init__(
        self,
        config: Optional[RiskEngineConfig] = None,
        settings: Optional[ProviderSettings] = None,
        *,
        document_analyzer: Optional[DocumentHeuristicAnalyzer] = None,
        legal_analyzer: Optional[LegalPatternAnalyzer] = None,
        financial_analyzer: Optional[FinancialRiskAnalyzer] = None,
        translator: Optional[TranslationClient] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the engine, building any collaborator not supplied

        Args:
            config: Taxonomies, thresholds, weights and bands
            settings: Provider credentials and endpoints (defaults to environment)
            document_analyzer: Document heuristic analyzer override
            legal_analyzer: Legal pattern analyzer override
            financial_analyzer: Financial risk analyzer override
            translator: Translation client override
            http_client: Shared HTTP client borrowed by the built providers
        """
        self.config = config or RiskEngineConfig()
        self.settings = settings or ProviderSettings.from_env()
        self._providers: List[Any] = []

        timeout = self.settings.timeout_seconds

        if document_analyzer is None:
            document_analyzer = DocumentHeuristicAnalyzer(self.config.document, self.config.bands)

        if legal_analyzer is None:
            case_law = CourtListenerClient(
                api_key=self.settings.court_listener_key,
                base_url=self.settings.court_listener_url,
                client=http_client,
                timeout=timeout
            )
            self._providers.append(case_law)
            legal_analyzer = LegalPatternAnalyzer(self.config.legal, case_law)

        if financial_analyzer is None:
            metrics_provider = AlphaVantageClient(
                api_key=self.settings.alpha_vantage_key,
                base_url=self.settings.alpha_vantage_url,
                client=http_client,
                timeout=timeout
            )
            self._providers.append(metrics_provider)
            financial_analyzer = FinancialRiskAnalyzer(
                self.config.financial,
                self.config.bands,
                metrics_provider=metrics_provider,
                market_provider=StaticMarketDataProvider()
            )

        if translator is None:
            translator = TranslationClient(
                self.settings.translation_endpoints,
                client=http_client,
                timeout=timeout
            )
            self._providers.append(translator)

        self.document_analyzer = document_analyzer
        self.legal_analyzer = legal_analyzer
        self.financial_analyzer = financial_analyzer
        self.translator = translator
        self.aggregator = RiskAggregator(self.config)

        logger.info("Initialized Counterparty Risk Engine with all components")

    async def aggregate_risk(self, request: Union[AnalysisRequest, Mapping[str, Any]]) -> RiskReport:
        """
        Complete pipeline: fan out every applicable analysis and aggregate

        Args:
            request: AnalysisRequest or a snake_case/camelCase payload mapping

        Returns:
            Full risk report, degraded where sources failed

        Raises:
            InvalidAnalysisRequest: if the request has no document text
        """
        request = self._coerce_request(request)

        with Timer() as timer:
            logger.info(f"Analyzing {request.document_type} for counterparty {request.counterparty or 'unknown'}")
            industry = request.normalized_industry(self.config.known_industries)

            branches = {
                "document": self.analyze_document(request.document_text, request.document_type),
                "legal": self.search_legal_precedents(request.document_text, request.document_type),
            }
            if request.counterparty:
                branches["financial"] = self.assess_financial_risk(
                    request.counterparty, industry, request.additional_data
                )
            if request.target_language:
                branches["translation"] = self.translate_document(
                    request.document_text, request.target_language, request.source_language
                )

            results = await gather_settled(branches)
            sources = AnalysisSources(
                document=results["document"],
                legal=results["legal"],
                financial=results.get("financial"),
                translation=results.get("translation")
            )
            report = self.aggregator.build_report(request, sources, timer.elapsed())

        logger.info(f"Risk analysis complete: score {report.risk.score} ({report.risk.risk_level.value}), "
                    f"confidence {report.risk.confidence}, {timer.elapsed():.2f}s total")
        return report

    @staticmethod
    def _coerce_request(request: Union[AnalysisRequest, Mapping[str, Any]]) -> AnalysisRequest:
        if isinstance(request, AnalysisRequest):
            return request
        if isinstance(request, Mapping):
            return AnalysisRequest.from_dict(request)
        raise InvalidAnalysisRequest("Request must be an AnalysisRequest or a mapping")

    @staticmethod
    def _require_text(text: Optional[str]) -> str:
        if not isinstance(text, str) or not text.strip():
            raise InvalidAnalysisRequest("Document text is required")
        return text

    async def analyze_document(self, text: str, document_type: str = "contract") -> DocumentAnalysis:
        """Document heuristic analysis only"""
        return await self.document_analyzer.analyze(self._require_text(text), document_type)

    async def search_legal_precedents(self, text: str, document_type: str = "contract") -> LegalAnalysis:
        """Legal patterns and precedents only"""
        return await self.legal_analyzer.search_precedents(self._require_text(text), document_type)

    async def assess_financial_risk(self, counterparty: str, industry: str = "default",
                                    additional_data: Optional[Mapping[str, Any]] = None) -> FinancialRiskAssessment:
        """Financial risk for a counterparty only"""
        if not isinstance(counterparty, str) or not counterparty.strip():
            raise InvalidAnalysisRequest("Counterparty name is required")
        industry = (industry or "default").strip().lower()
        if industry not in set(self.config.known_industries):
            industry = "default"
        return await self.financial_analyzer.assess_financial_risk(counterparty.strip(), industry, additional_data)

    async def translate_document(self, text: str, target_language: str = "hi",
                                 source_language: str = "en") -> TranslationResult:
        """Translate text, passing it through unchanged when no service responds"""
        return await self.translator.translate_text(self._require_text(text), target_language, source_language)

    async def get_supported_languages(self) -> List[Dict[str, str]]:
        return await self.translator.get_supported_languages()

    def get_system_status(self) -> Dict[str, Any]:
        """Get status of all engine components"""
        return {
            "engine_initialized": True,
            "components": {
                "document_analyzer": bool(self.document_analyzer),
                "legal_analyzer": bool(self.legal_analyzer),
                "financial_analyzer": bool(self.financial_analyzer),
                "translator": bool(self.translator),
                "aggregator": bool(self.aggregator)
            },
            "providers": {
                "alpha_vantage": "demo" if self.settings.alpha_vantage_key == "demo" else "configured",
                "court_listener": "configured" if self.settings.court_listener_key else "not_configured",
                "translation_endpoints": len(self.settings.translation_endpoints)
            },
            "configuration": {
                "weights": {
                    "document": self.config.weights.document,
                    "financial": self.config.weights.financial,
                    "legal": self.config.weights.legal,
                    "sentiment": self.config.weights.sentiment
                },
                "bands": {"low": self.config.bands.low, "medium": self.config.bands.medium},
                "timeout_seconds": self.settings.timeout_seconds
            }
        }

    def configure_logging(self, level: str = "INFO", log_file: Optional[str] = None):
        """Configure logging for the risk engine"""

        log_level = getattr(logging, level.upper(), logging.INFO)

        logging.basicConfig(
            level=log_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[
                logging.StreamHandler(),
                logging.FileHandler(log_file) if log_file else logging.NullHandler()
            ]
        )

        logger.info(f"Configured logging at {level} level")

        if log_file:
            logger.info(f"Logging to file: {log_file}")

    async def aclose(self):
        """Close HTTP clients owned by the built providers"""
        for provider in self._providers:
            await provider.aclose()

    async def __aenter__(self) -> "CounterpartyRiskEngine":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def __repr__(self):
        return (f"CounterpartyRiskEngine(providers={len(self._providers)}, "
                f"industries={len(list(self.config.known_industries))})")


def create_risk_engine(
    config_path: Optional[str] = None,
    settings: Optional[ProviderSettings] = None,
    **kwargs
) -> CounterpartyRiskEngine:
    """
    Factory function to create a configured risk engine

    Args:
        config_path: Optional JSON configuration file
        settings: Provider settings (defaults to environment variables)
        **kwargs: Collaborator overrides passed to the engine

    Returns:
        Configured CounterpartyRiskEngine instance
    """
    config = RiskEngineConfig.load_from_file(config_path) if config_path else RiskEngineConfig()
    return CounterpartyRiskEngine(config=config, settings=settings, **kwargs)
