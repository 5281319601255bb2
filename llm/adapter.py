"""LLM adapters for extraction and draft generation.

Provides a base interface and concrete adapters for OpenAI-compatible
APIs and a deterministic mock for testing.
"""

import json
from abc import ABC, abstractmethod
from typing import Optional

from openai import OpenAI


class BaseLLMAdapter(ABC):
    """Abstract base for all LLM adapters."""

    @abstractmethod
    def generate(self, prompt: str, system: Optional[str] = None) -> str:
        """Send a prompt to the LLM and return the raw response text.

        Args:
            prompt: The fully formatted user prompt.
            system: Optional system message.

        Returns:
            Raw string response from the model (expected to be JSON).
        """


class OpenAILLMAdapter(BaseLLMAdapter):
    """Adapter for OpenAI-compatible chat completion APIs.

    Requests JSON-object output so extraction and generation prompts
    come back as parseable payloads.
    """

    def __init__(
        self,
        model: str = "gpt-4o",
        max_tokens: int = 4096,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        client_kwargs: dict = {}
        if api_key:
            client_kwargs["api_key"] = api_key
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = OpenAI(**client_kwargs)
        self._model = model
        self._max_tokens = max_tokens

    def generate(self, prompt: str, system: Optional[str] = None) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            temperature=0.4,
            max_tokens=self._max_tokens,
            response_format={"type": "json_object"},
            stream=False,
        )
        return response.choices[0].message.content or ""


# ---------------------------------------------------------------------------
# Fixed mock response used for local testing.
# ---------------------------------------------------------------------------
_MOCK_RESPONSE = {
    "title": "Mock article",
    "source": "Mock Newsletter",
    "author": "",
    "summary": "Mock summary for testing purposes.",
    "keyInsights": ["First takeaway", "Second takeaway", "Third takeaway"],
    "fullText": "Mock article body.",
    "publicationDate": "",
    "isArticle": True,
    "nonArticleReason": "",
    "angle": "Mock angle.",
    "content": "Mock generated content.",
    "articles": [
        {
            "title": "Mock article",
            "url": "https://example.com/mock-article",
            "source": "Mock Newsletter",
            "author": "",
            "summary": "Mock summary for testing purposes.",
            "keyInsights": ["First takeaway", "Second takeaway"],
            "fullText": "Mock article body.",
            "publicationDate": "",
        }
    ],
}

_MOCK_RESPONSE_JSON = json.dumps(_MOCK_RESPONSE, indent=2)


class MockLLMAdapter(BaseLLMAdapter):
    """Deterministic adapter that returns a fixed valid JSON response.

    The payload satisfies the extraction, bulk extraction and generation
    schemas.
    """

    def generate(self, prompt: str, system: Optional[str] = None) -> str:
        return _MOCK_RESPONSE_JSON
