from __future__ import annotations

import httpx

from ideaforge.core.providers.base import BackendIdentity, ProviderAdapter, ProviderRequest
from ideaforge.core.providers.extraction import decode, extract_first, serialize, text_at
from ideaforge.core.runtime.errors import BackendRejected


class HuggingFaceAdapter(ProviderAdapter):
    """Hosted model router. Best-effort last resort.

    Unlike the other backends, a non-2xx status or an ``error`` field in the
    payload is a hard failure: quota exhaustion here must surface so routing
    can move on instead of returning the error body as generated text.
    """

    identity = BackendIdentity.TERTIARY
    strategies = (
        text_at(0, "generated_text"),
        text_at("generated_text"),
    )

    def build_call(self, request: ProviderRequest) -> tuple[str, dict, dict[str, str]]:
        base = (self.config.base_url or "").rstrip("/")
        body = {
            "inputs": request.prompt,
            "parameters": {
                "max_new_tokens": request.max_output_tokens,
                "temperature": self.config.temperature,
            },
        }
        headers = {"Content-Type": "application/json", "Authorization": f"Bearer {self.config.api_key or ''}"}
        return f"{base}/models/{self.model_for(request)}", body, headers

    def handle_response(self, response: httpx.Response) -> str:
        if not response.is_success:
            raise BackendRejected(
                f"huggingface {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        ok, payload = decode(response.text)
        if not ok:
            return response.text
        found = extract_first(payload, self.strategies)
        if found is not None:
            return found
        if isinstance(payload, dict) and payload.get("error"):
            raise BackendRejected(f"huggingface error: {payload['error']}", status_code=response.status_code)
        return serialize(payload)
