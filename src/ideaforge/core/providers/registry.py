from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from ideaforge.core.config.schema import AppConfig, ProviderConfig
from ideaforge.core.providers.base import BackendIdentity, ProviderAdapter
from ideaforge.core.providers.gemini_adapter import GeminiAdapter
from ideaforge.core.providers.huggingface_adapter import HuggingFaceAdapter
from ideaforge.core.providers.ollama_adapter import OllamaAdapter
from ideaforge.core.providers.openai_adapter import OpenAIChatAdapter
from ideaforge.core.runtime.retries import ResilientTransport, RetryPolicy
from ideaforge.core.telemetry.logging import get_logger

ADAPTER_TYPES: dict[BackendIdentity, type[ProviderAdapter]] = {
    BackendIdentity.LOCAL: OllamaAdapter,
    BackendIdentity.CLOUD_PRIMARY: GeminiAdapter,
    BackendIdentity.CLOUD_SECONDARY: OpenAIChatAdapter,
    BackendIdentity.TERTIARY: HuggingFaceAdapter,
}


def provider_config(cfg: AppConfig, identity: BackendIdentity) -> ProviderConfig:
    return getattr(cfg.providers, identity.value)


def build_adapters(
    cfg: AppConfig,
    client: httpx.AsyncClient,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    logger=None,
) -> dict[BackendIdentity, ProviderAdapter]:
    log = logger or get_logger("ideaforge.providers")
    policy = RetryPolicy.from_config(cfg.runtime)
    adapters: dict[BackendIdentity, ProviderAdapter] = {}
    for identity, adapter_type in ADAPTER_TYPES.items():

        def _on_retry(attempt: int, delay: float, reason: str, _backend: str = identity.value) -> None:
            log.info(
                "transport_retry",
                backend=_backend,
                attempt=attempt,
                delay_seconds=round(delay, 3),
                reason=reason,
            )

        transport = ResilientTransport(client, policy, sleep=sleep, on_retry=_on_retry)
        adapters[identity] = adapter_type(provider_config(cfg, identity), transport)
    return adapters
