from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from ideaforge.core.config.loader import load_app_config
from ideaforge.core.config.schema import AppConfig
from ideaforge.core.orchestrator.routing import RoutingPolicy, build_routing_policy
from ideaforge.core.orchestrator.task_orchestrator import TaskOrchestrator
from ideaforge.core.projects.store import ProjectStore
from ideaforge.core.prompts.personas import known_domains
from ideaforge.core.providers.base import BackendIdentity, ProviderAdapter
from ideaforge.core.providers.registry import build_adapters
from ideaforge.core.runtime.rate_limit import FixedWindowLimiter
from ideaforge.core.telemetry.logging import configure_logging, get_logger
from ideaforge.db.session import create_session_factory, init_db


@dataclass(slots=True)
class IdeaForgeRuntime:
    cfg: AppConfig
    client: httpx.AsyncClient
    adapters: dict[BackendIdentity, ProviderAdapter]
    policy: RoutingPolicy
    orchestrator: TaskOrchestrator
    projects: ProjectStore
    api_limiter: FixedWindowLimiter
    ai_limiter: FixedWindowLimiter

    def provider_summary(self) -> dict[str, Any]:
        return {
            "configured": sorted(i.value for i, a in self.adapters.items() if a.is_configured()),
            "preferred": self.cfg.providers.preferred,
            "domains": known_domains(),
            "routing": self.policy.as_dict(),
        }

    async def aclose(self) -> None:
        await self.client.aclose()


def build_runtime(
    cfg: AppConfig | None = None,
    *,
    config_path: str | None = None,
    client: httpx.AsyncClient | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> IdeaForgeRuntime:
    cfg = cfg or load_app_config(instance_path=config_path)
    configure_logging(cfg.telemetry.log_level, cfg.telemetry.json_logs)
    logger = get_logger("ideaforge.runtime")

    client = client or httpx.AsyncClient(timeout=cfg.runtime.request_timeout_seconds)
    adapters = build_adapters(cfg, client, sleep=sleep)
    policy = build_routing_policy(cfg, adapters)
    orchestrator = TaskOrchestrator(
        adapters,
        policy,
        title_fallback_chars=cfg.runtime.title_fallback_chars,
    )

    session_factory, engine = create_session_factory(cfg.database.url)
    init_db(engine)

    runtime = IdeaForgeRuntime(
        cfg=cfg,
        client=client,
        adapters=adapters,
        policy=policy,
        orchestrator=orchestrator,
        projects=ProjectStore(session_factory),
        api_limiter=FixedWindowLimiter(
            max_requests=cfg.rate_limit.api_max_requests,
            window_seconds=cfg.rate_limit.api_window_seconds,
        ),
        ai_limiter=FixedWindowLimiter(
            max_requests=cfg.rate_limit.ai_max_requests,
            window_seconds=cfg.rate_limit.ai_window_seconds,
        ),
    )
    summary = runtime.provider_summary()
    logger.info("runtime_ready", environment=cfg.environment, **summary)
    if not summary["configured"]:
        logger.warning("no_ai_provider_configured")
    return runtime
