from __future__ import annotations

from collections.abc import Callable
from time import perf_counter

import httpx
from pydantic import BaseModel

from ideaforge.core.config.schema import AppConfig, ProviderConfig
from ideaforge.core.providers.base import BackendIdentity
from ideaforge.core.providers.gemini_adapter import auth_headers
from ideaforge.core.providers.registry import provider_config


class ProviderCheckResult(BaseModel):
    provider: str
    enabled: bool
    ok: bool
    latency_ms: float | None = None
    error: str | None = None


def _bearer(pc: ProviderConfig) -> dict[str, str]:
    return {"Authorization": f"Bearer {pc.api_key or ''}"}


# Cheap read-only endpoint per backend: (url builder, header builder).
_PROBES: dict[BackendIdentity, tuple[Callable[[str], str], Callable[[ProviderConfig], dict[str, str]]]] = {
    BackendIdentity.LOCAL: (lambda base: f"{base}/api/tags", lambda pc: {}),
    BackendIdentity.CLOUD_PRIMARY: (lambda base: base, lambda pc: auth_headers(pc.api_key or "")),
    BackendIdentity.CLOUD_SECONDARY: (lambda base: f"{base}/models", _bearer),
}


def _needs_credential(identity: BackendIdentity) -> bool:
    return identity is not BackendIdentity.LOCAL


def check_provider(
    identity: BackendIdentity,
    pc: ProviderConfig,
    *,
    skip_tests: bool = False,
    timeout_seconds: float = 4.0,
    client: httpx.Client | None = None,
) -> ProviderCheckResult:
    name = identity.value
    if not pc.enabled:
        return ProviderCheckResult(provider=name, enabled=False, ok=False, error="disabled")
    base = (pc.base_url or "").rstrip("/")
    if not base:
        return ProviderCheckResult(provider=name, enabled=True, ok=False, error="missing base_url")
    if _needs_credential(identity) and not pc.has_credential():
        return ProviderCheckResult(provider=name, enabled=True, ok=False, error="missing api key in env")
    if skip_tests:
        return ProviderCheckResult(provider=name, enabled=True, ok=False, error="skipped")
    probe = _PROBES.get(identity)
    if probe is None:
        return ProviderCheckResult(provider=name, enabled=True, ok=True, error="not probed")

    url_for, headers_for = probe
    started = perf_counter()
    try:
        if client is not None:
            resp = client.get(url_for(base), headers=headers_for(pc), timeout=timeout_seconds)
        else:
            with httpx.Client(timeout=timeout_seconds) as own_client:
                resp = own_client.get(url_for(base), headers=headers_for(pc))
        resp.raise_for_status()
        return ProviderCheckResult(
            provider=name,
            enabled=True,
            ok=True,
            latency_ms=round((perf_counter() - started) * 1000, 2),
        )
    except Exception as exc:  # noqa: BLE001
        return ProviderCheckResult(
            provider=name,
            enabled=True,
            ok=False,
            latency_ms=round((perf_counter() - started) * 1000, 2),
            error=str(exc),
        )


def check_configured_providers(
    cfg: AppConfig,
    skip_tests: bool = False,
    timeout_seconds: float = 4.0,
    client: httpx.Client | None = None,
) -> dict[str, ProviderCheckResult]:
    return {
        identity.value: check_provider(
            identity,
            provider_config(cfg, identity),
            skip_tests=skip_tests,
            timeout_seconds=timeout_seconds,
            client=client,
        )
        for identity in BackendIdentity
    }
