"""Content classification backends.

The decision engine only talks to :class:`ContentClassifier`; the HTTP client
below is what production wires in through :func:`get_classifier`.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from trustcore.core.config import settings
from trustcore.core.errors import UpstreamError

logger = logging.getLogger(__name__)


class ContentClassifier(ABC):
    """Decides what happens to a piece of newly submitted content."""

    @abstractmethod
    async def submit(self, content: str, content_type: str, content_id: int, user_id: int) -> Dict[str, Any]:
        """Return the raw verdict payload (camelCase keys).

        Raises :class:`UpstreamError` when no usable answer is available.
        """


class HttpContentClassifier(ContentClassifier):
    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def submit(self, content: str, content_type: str, content_id: int, user_id: int) -> Dict[str, Any]:
        body = {
            "content": content,
            "contentType": content_type,
            "contentId": content_id,
            "userId": user_id,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=body, headers=self._headers())
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(f"Classifier returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Classifier unreachable: {e.__class__.__name__}") from e
        except ValueError as e:
            raise UpstreamError("Classifier returned a non-JSON body") from e

        if not isinstance(payload, dict):
            raise UpstreamError("Classifier returned an unexpected payload")
        return payload


_default_classifier: Optional[ContentClassifier] = None

def get_classifier() -> ContentClassifier:
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = HttpContentClassifier(
            url=settings.CLASSIFIER_URL,
            api_key=settings.CLASSIFIER_API_KEY,
            timeout=settings.CLASSIFIER_TIMEOUT_SECONDS,
        )
        logger.info(f"[Classifier] Using HTTP classifier at {settings.CLASSIFIER_URL}")
    return _default_classifier
