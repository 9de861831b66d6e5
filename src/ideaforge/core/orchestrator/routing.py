from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from ideaforge.core.config.schema import AppConfig
from ideaforge.core.orchestrator.models import TaskKind
from ideaforge.core.providers.base import BackendIdentity, ProviderAdapter
from ideaforge.core.telemetry.logging import get_logger


@dataclass(slots=True, frozen=True)
class RoutingPolicy:
    """Ordered fallback sequence of eligible backends per task kind."""

    routes: Mapping[TaskKind, tuple[BackendIdentity, ...]]

    def for_task(self, task_kind: TaskKind) -> tuple[BackendIdentity, ...]:
        return self.routes.get(task_kind, ())

    def as_dict(self) -> dict[str, list[str]]:
        return {kind.value: [b.value for b in order] for kind, order in self.routes.items()}


def _parse_order(names: list[str], task_kind: TaskKind) -> list[BackendIdentity]:
    order: list[BackendIdentity] = []
    for name in names:
        try:
            identity = BackendIdentity.parse(name)
        except ValueError as exc:
            raise ValueError(f"unknown backend {name!r} in routing.{task_kind.value}") from exc
        if identity not in order:
            order.append(identity)
    return order


def resolve_preferred(value: str | None) -> BackendIdentity | None:
    if not value or not value.strip():
        return None
    try:
        return BackendIdentity.parse(value)
    except ValueError:
        get_logger("ideaforge.routing").warning("preferred_provider_unknown", value=value)
        return None


def build_routing_policy(cfg: AppConfig, adapters: Mapping[BackendIdentity, ProviderAdapter]) -> RoutingPolicy:
    """Inspect configuration once and freeze the per-task fallback order.

    Backends without a usable URL or credential are dropped entirely. A
    preferred provider, when set and eligible, leads every sequence.
    """
    eligible = {identity for identity, adapter in adapters.items() if adapter.is_configured()}
    preferred = resolve_preferred(cfg.providers.preferred)

    routes: dict[TaskKind, tuple[BackendIdentity, ...]] = {}
    for task_kind in TaskKind:
        order = _parse_order(getattr(cfg.routing, task_kind.value), task_kind)
        if preferred is not None:
            order = [preferred, *[b for b in order if b is not preferred]]
        routes[task_kind] = tuple(b for b in order if b in eligible)
    return RoutingPolicy(routes=MappingProxyType(routes))
