"""Multi-provider LLM adapter used as the semantic classifier.

Every provider exposes a single ``generate(prompt)`` call returning the model's
text, or ``None`` when the provider is unreachable or answers with something
unusable. Callers never see transport exceptions.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from .config_manager import resolve_llm_settings

logger = logging.getLogger(__name__)

TEMPERATURE = 0
MAX_OUTPUT_TOKENS = 2048
REQUEST_TIMEOUT = 60


class LLMProvider:
    """Base class for LLM providers."""

    name = "base"
    requires_key = True

    def __init__(self, model: str, api_key: str = "", endpoint: str = ""):
        self.model = model
        self.api_key = api_key
        self.endpoint = endpoint

    def generate(self, prompt: str) -> Optional[str]:
        """Generate a response from the LLM."""
        if self.requires_key and not self.api_key:
            logger.warning("No API key configured for provider '%s'", self.name)
            return None
        try:
            response = requests.post(
                self.url(),
                headers=self.headers(),
                json=self.payload(prompt),
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            text = self.extract(response.json())
        except requests.RequestException as exc:
            logger.warning("LLM request to '%s' failed: %s", self.name, exc)
            return None
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning("Malformed response from '%s': %s", self.name, exc)
            return None
        return text or None

    def url(self) -> str:
        return self.endpoint

    def headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def payload(self, prompt: str) -> Dict[str, Any]:
        raise NotImplementedError

    def extract(self, parsed: Dict[str, Any]) -> Optional[str]:
        raise NotImplementedError


class OllamaProvider(LLMProvider):
    """Ollama local LLM provider."""

    name = "ollama"
    requires_key = False

    def payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": TEMPERATURE, "num_predict": MAX_OUTPUT_TOKENS},
        }

    def extract(self, parsed: Dict[str, Any]) -> Optional[str]:
        return parsed.get("response")


class OpenAICompatibleProvider(LLMProvider):
    """OpenAI chat-completions API; also serves Groq and OpenRouter."""

    name = "openai"

    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": TEMPERATURE,
            "max_tokens": MAX_OUTPUT_TOKENS,
        }

    def extract(self, parsed: Dict[str, Any]) -> Optional[str]:
        msg = parsed["choices"][0]["message"]
        content = msg.get("content") or ""
        if content.strip():
            return content
        # Reasoning models put output in 'reasoning' field
        return msg.get("reasoning") or content or None


class AnthropicProvider(LLMProvider):
    """Anthropic Claude API provider."""

    name = "anthropic"

    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
        }

    def payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": MAX_OUTPUT_TOKENS,
            "temperature": TEMPERATURE,
        }

    def extract(self, parsed: Dict[str, Any]) -> Optional[str]:
        return parsed["content"][0]["text"]


class GeminiProvider(LLMProvider):
    """Google Gemini API provider."""

    name = "gemini"

    def url(self) -> str:
        return self.endpoint or (
            f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
        )

    def headers(self) -> Dict[str, str]:
        # Key stays out of the URL so request errors never log it.
        return {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }

    def payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": TEMPERATURE,
                "maxOutputTokens": MAX_OUTPUT_TOKENS,
            },
        }

    def extract(self, parsed: Dict[str, Any]) -> Optional[str]:
        parts = parsed["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)


_DEFAULT_ENDPOINTS = {
    "ollama": "http://127.0.0.1:11434/api/generate",
    "openai": "https://api.openai.com/v1/chat/completions",
    "groq": "https://api.groq.com/openai/v1/chat/completions",
    "openrouter": "https://openrouter.ai/api/v1/chat/completions",
    "anthropic": "https://api.anthropic.com/v1/messages",
}


class LocalLLM:
    """Configured LLM client acting as the semantic classifier oracle."""

    def __init__(
        self,
        model: Optional[str] = None,
        provider: Optional[str] = None,
        api_key: Optional[str] = None,
        endpoint: Optional[str] = None,
    ):
        """Initialize LLM with provider selection.

        Args:
            model: Model name (defaults to config)
            provider: ollama, gemini, openai, groq, openrouter or anthropic (defaults to config)
            api_key: API key for cloud providers (defaults to config, then environment)
            endpoint: Custom endpoint URL
        """
        settings = resolve_llm_settings(provider, model, api_key, endpoint)
        self.provider_name = settings["provider"]
        self.model = settings["model"]
        self.api_key = settings["api_key"]
        self.endpoint = settings["endpoint"]

        self.provider = self._create_provider()

    def _create_provider(self) -> LLMProvider:
        name = self.provider_name
        endpoint = self.endpoint or _DEFAULT_ENDPOINTS.get(name, "")

        if name == "gemini":
            return GeminiProvider(self.model, self.api_key, self.endpoint)
        if name == "anthropic":
            return AnthropicProvider(self.model, self.api_key, endpoint)
        if name in ("openai", "groq", "openrouter"):
            provider = OpenAICompatibleProvider(self.model, self.api_key, endpoint)
            provider.name = name
            return provider
        if name != "ollama":
            logger.warning("Unknown LLM provider '%s'; falling back to Ollama", name)
        return OllamaProvider(self.model, endpoint=endpoint or _DEFAULT_ENDPOINTS["ollama"])

    def generate(self, prompt: str) -> Optional[str]:
        """Run one prompt through the configured provider."""
        response = self.provider.generate(prompt)
        if response is None:
            return None
        return response.strip()

    def describe(self) -> str:
        return f"{self.provider_name}:{self.model}"
