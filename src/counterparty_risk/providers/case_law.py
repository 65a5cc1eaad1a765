"""
Legal Case Search Provider

Queries the CourtListener opinion search for precedents matching a set of
legal keywords. Without an API key, or when the service fails, a fixed mock
result list is returned instead.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple

import httpx

from ..models.results import Serializable
from .base import HttpProvider, ProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaseSummary(Serializable):
    """Ranked legal case summary"""
    title: str
    court: str
    citation: Optional[str]
    summary: str
    relevance: float = 0.5
    date: Optional[str] = None
    year: Optional[int] = None
    url: Optional[str] = None
    key_holdings: Tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, case: Mapping[str, Any]) -> "CaseSummary":
        return cls(
            title=case.get("title", "Unknown Case"),
            court=case.get("court", "Unknown Court"),
            citation=case.get("citation"),
            summary=case.get("summary", "No summary available"),
            relevance=case.get("relevance", 0.5),
            date=case.get("date"),
            year=case.get("year"),
            url=case.get("url"),
            key_holdings=tuple(case.get("key_holdings", ()))
        )

    def mentions(self, keyword: str) -> bool:
        """Case-insensitive keyword overlap with the summary or any holding"""
        keyword_lower = keyword.lower()
        if keyword_lower in self.summary.lower():
            return True
        return any(keyword_lower in holding.lower() for holding in self.key_holdings)


MOCK_SEARCH_RESULTS = (
    CaseSummary(
        title="Sample Contract Dispute Case",
        court="U.S. District Court",
        date="2023-01-15",
        relevance=0.8,
        citation="Mock Citation 123",
        summary="Relevant case involving similar contractual terms and risk allocation",
        url="https://example.com/case1"
    ),
)


class CourtListenerClient(HttpProvider):
    """Precedent search against the CourtListener REST API"""

    COURTS = "scotus,ca1,ca2,ca3,ca4,ca5,ca6,ca7,ca8,ca9,ca10,ca11,cadc"
    MAX_RESULTS = 5

    def __init__(self, api_key: Optional[str] = None,
                 base_url: str = "https://www.courtlistener.com/api/rest/v3",
                 client: Optional[httpx.AsyncClient] = None,
                 timeout: float = 10.0):
        super().__init__(client=client, timeout=timeout)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def search(self, keywords: Sequence[str]) -> List[CaseSummary]:
        """Search precedential opinions using the top three keywords"""
        if not self.configured:
            logger.warning("Court Listener API key not configured - using mock results")
            return list(MOCK_SEARCH_RESULTS)

        try:
            data = await self._get_json(
                f"{self.base_url}/search/",
                params={
                    "q": " AND ".join(keywords[:3]),
                    "type": "o",
                    "order_by": "score desc",
                    "stat_Precedential": "on",
                    "court": self.COURTS
                },
                headers={"Authorization": f"Token {self.api_key}"}
            )
        except ProviderError as e:
            logger.error(f"Court Listener API error: {e}")
            return list(MOCK_SEARCH_RESULTS)

        return self._format_results(data)

    def _format_results(self, data: Any) -> List[CaseSummary]:
        if not isinstance(data, dict) or not data.get("results"):
            return []

        cases = []
        for result in data["results"][:self.MAX_RESULTS]:
            citation = result.get("citation")
            if isinstance(citation, list):
                citation = citation[0] if citation else None
            cases.append(CaseSummary(
                title=result.get("caseName") or "Unknown Case",
                court=result.get("court") or "Unknown Court",
                date=result.get("dateFiled"),
                relevance=result.get("score") or 0.5,
                citation=citation,
                summary=result.get("snippet") or "No summary available",
                url=f"https://www.courtlistener.com{result.get('absolute_url', '')}"
            ))
        return cases
