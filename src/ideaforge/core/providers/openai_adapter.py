from __future__ import annotations

from ideaforge.core.providers.base import BackendIdentity, ProviderAdapter, ProviderRequest
from ideaforge.core.providers.extraction import text_at


class OpenAIChatAdapter(ProviderAdapter):
    identity = BackendIdentity.CLOUD_SECONDARY
    strategies = (text_at("choices", 0, "message", "content"),)

    def build_call(self, request: ProviderRequest) -> tuple[str, dict, dict[str, str]]:
        base = (self.config.base_url or "").rstrip("/")
        body = {
            "model": self.model_for(request),
            "messages": [
                {"role": "system", "content": request.instruction},
                {"role": "user", "content": request.content},
            ],
            "max_tokens": request.max_output_tokens,
            "temperature": self.config.temperature,
        }
        headers = {"Content-Type": "application/json", "Authorization": f"Bearer {self.config.api_key or ''}"}
        return f"{base}/chat/completions", body, headers
