"""
Translation Provider

Translates document text through a list of LibreTranslate-compatible
endpoints, trying each in turn. When every endpoint fails the original
text is passed through with zero confidence; translation never raises.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import httpx

from ..models.results import Serializable
from .base import HttpProvider, ProviderError

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGES = [
    {"code": "hi", "name": "Hindi"},
    {"code": "es", "name": "Spanish"},
    {"code": "fr", "name": "French"},
    {"code": "de", "name": "German"},
]


@dataclass(frozen=True)
class TranslationResult(Serializable):
    """Translated text with the service that produced it"""
    translated_text: str
    service: str
    confidence: float
    source_language: str = "en"
    target_language: str = "hi"
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.service == "fallback"


class TranslationClient(HttpProvider):
    """Free translation through public LibreTranslate instances"""

    DEFAULT_CONFIDENCE = 0.8

    def __init__(self, endpoints: Sequence[str],
                 client: Optional[httpx.AsyncClient] = None,
                 timeout: float = 10.0):
        super().__init__(client=client, timeout=timeout)
        self.endpoints = [endpoint.rstrip("/") for endpoint in endpoints]

    async def translate_text(self, text: str,
                             target_language: str = "hi",
                             source_language: str = "en") -> TranslationResult:
        for endpoint in self.endpoints:
            try:
                data = await self._post_json(f"{endpoint}/translate", {
                    "q": text,
                    "source": source_language,
                    "target": target_language,
                    "format": "text"
                })
            except ProviderError as e:
                logger.warning(f"Translation failed with {endpoint}: {e}")
                continue

            if isinstance(data, dict) and data.get("translatedText"):
                return TranslationResult(
                    translated_text=data["translatedText"],
                    service=endpoint,
                    confidence=data.get("confidence") or self.DEFAULT_CONFIDENCE,
                    source_language=source_language,
                    target_language=target_language
                )
            logger.warning(f"Translation endpoint {endpoint} returned no text")

        return TranslationResult(
            translated_text=text,
            service="fallback",
            confidence=0,
            source_language=source_language,
            target_language=target_language,
            error="All translation services unavailable"
        )

    async def get_supported_languages(self) -> List[Dict[str, str]]:
        """Languages offered by the first endpoint, or a fixed default list"""
        if not self.endpoints:
            return list(DEFAULT_LANGUAGES)
        try:
            data = await self._get_json(f"{self.endpoints[0]}/languages")
        except ProviderError as e:
            logger.warning(f"Could not list translation languages: {e}")
            return list(DEFAULT_LANGUAGES)
        return data if isinstance(data, list) and data else list(DEFAULT_LANGUAGES)
