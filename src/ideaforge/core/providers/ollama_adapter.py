from __future__ import annotations

from ideaforge.core.providers.base import BackendIdentity, ProviderAdapter, ProviderRequest
from ideaforge.core.providers.extraction import decode, extract_first, text_at


class OllamaAdapter(ProviderAdapter):
    """Local inference server (``/api/generate``). Trusted network, no auth."""

    identity = BackendIdentity.LOCAL
    strategies = (text_at("response"),)

    def is_configured(self) -> bool:
        return bool(self.config.enabled and (self.config.base_url or "").strip())

    def build_call(self, request: ProviderRequest) -> tuple[str, dict, dict[str, str]]:
        base = (self.config.base_url or "").rstrip("/")
        body = {
            "model": self.model_for(request),
            "prompt": request.prompt,
            "stream": False,
            "options": {
                "num_predict": request.max_output_tokens,
                "temperature": self.config.temperature,
            },
        }
        return f"{base}/api/generate", body, {"Content-Type": "application/json"}

    def extract_text(self, body_text: str) -> str:
        ok, payload = decode(body_text)
        if not ok:
            return body_text
        return extract_first(payload, self.strategies) or body_text
