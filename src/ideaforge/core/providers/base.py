from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

import httpx

from ideaforge.core.config.schema import ProviderConfig
from ideaforge.core.providers.extraction import ExtractionStrategy, normalize_body
from ideaforge.core.runtime.retries import ResilientTransport


class BackendIdentity(str, Enum):
    LOCAL = "local"
    CLOUD_PRIMARY = "cloud_primary"
    CLOUD_SECONDARY = "cloud_secondary"
    TERTIARY = "tertiary"

    @classmethod
    def parse(cls, value: str) -> BackendIdentity:
        key = value.strip().lower().replace("-", "_")
        if key in _ALIASES:
            return _ALIASES[key]
        return cls(key)


# Vendor names accepted wherever a backend is named in configuration.
_ALIASES: dict[str, BackendIdentity] = {
    "ollama": BackendIdentity.LOCAL,
    "gemini": BackendIdentity.CLOUD_PRIMARY,
    "openai": BackendIdentity.CLOUD_SECONDARY,
    "huggingface": BackendIdentity.TERTIARY,
    "hf": BackendIdentity.TERTIARY,
}


@dataclass(slots=True, frozen=True)
class ProviderRequest:
    """One generation call. ``instruction`` is the persona text, ``content``
    the task-specific body; backends that take a single prompt get both
    joined by a blank line."""

    instruction: str
    content: str
    max_output_tokens: int = 320
    model: str | None = None

    @property
    def prompt(self) -> str:
        if not self.instruction:
            return self.content
        return f"{self.instruction}\n\n{self.content}"


class ProviderAdapter(ABC):
    identity: BackendIdentity
    strategies: tuple[ExtractionStrategy, ...] = ()

    def __init__(self, config: ProviderConfig, transport: ResilientTransport) -> None:
        self.config = config
        self.transport = transport

    @property
    def name(self) -> str:
        return self.identity.value

    def model_for(self, request: ProviderRequest) -> str:
        return (request.model or "").strip() or self.config.model

    def is_configured(self) -> bool:
        return bool(self.config.enabled and (self.config.base_url or "").strip() and self.config.has_credential())

    def extract_text(self, body_text: str) -> str:
        """Best available string from a raw response body. Never raises on shape."""
        return normalize_body(body_text, self.strategies)

    @abstractmethod
    def build_call(self, request: ProviderRequest) -> tuple[str, dict, dict[str, str]]:
        """Return ``(url, json_body, headers)`` for this backend's wire protocol."""
        raise NotImplementedError

    async def generate(self, request: ProviderRequest) -> str:
        url, body, headers = self.build_call(request)
        response = await self.transport.attempt(
            "POST",
            url,
            json=body,
            headers=headers,
            timeout=self.config.timeout_seconds,
        )
        return self.handle_response(response)

    def handle_response(self, response: httpx.Response) -> str:
        return self.extract_text(response.text)
