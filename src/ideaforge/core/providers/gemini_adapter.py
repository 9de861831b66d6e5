from __future__ import annotations

from ideaforge.core.providers.base import BackendIdentity, ProviderAdapter, ProviderRequest
from ideaforge.core.providers.extraction import text_at

# Google API keys carry this prefix; anything else is sent as an OAuth bearer token.
API_KEY_PREFIX = "AIza"


def auth_headers(api_key: str) -> dict[str, str]:
    if api_key.startswith(API_KEY_PREFIX):
        return {"X-goog-api-key": api_key}
    return {"Authorization": f"Bearer {api_key}"}


class GeminiAdapter(ProviderAdapter):
    """Generative Language ``generateContent`` endpoint.

    Response shapes differ between API versions, so extraction walks several
    known layouts before giving up and returning the serialized payload.
    """

    identity = BackendIdentity.CLOUD_PRIMARY
    strategies = (
        text_at("candidates", 0, "content", "parts", 0, "text"),
        text_at("candidates", 0, "content", 0, "parts", 0, "text"),
        text_at("output", 0, "content", 0, "text"),
        text_at("candidates", 0, "text"),
    )

    def build_call(self, request: ProviderRequest) -> tuple[str, dict, dict[str, str]]:
        base = (self.config.base_url or "").rstrip("/")
        body = {"contents": [{"parts": [{"text": request.prompt}]}]}
        headers = {"Content-Type": "application/json", **auth_headers(self.config.api_key or "")}
        return f"{base}/{self.model_for(request)}:generateContent", body, headers
