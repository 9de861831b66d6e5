from __future__ import annotations

import asyncio

import pytest

from ideaforge.core.orchestrator.models import TaskKind
from ideaforge.core.orchestrator.routing import RoutingPolicy
from ideaforge.core.orchestrator.task_orchestrator import TaskOrchestrator
from ideaforge.core.prompts.builder import SHORT_TITLE_MAX_TOKENS
from ideaforge.core.providers.base import BackendIdentity
from ideaforge.core.runtime.errors import TransportExhausted
from ideaforge.core.telemetry.tracing import clear_traces, recent_traces


class FlakyLocal:
    """Fails every third call; answers with the concept echoed back otherwise."""

    def __init__(self) -> None:
        self.calls = 0

    async def generate(self, request):
        self.calls += 1
        await asyncio.sleep(0)
        if self.calls % 3 == 0:
            raise TransportExhausted("flaky")
        if request.max_output_tokens == SHORT_TITLE_MAX_TOKENS:
            return request.content.split("\n")[1].upper()
        concept = request.content.split("\n")[0].removeprefix("Concept: ")
        return f"1. {concept} one\n2. {concept} two"


class SteadyCloud:
    async def generate(self, request):
        await asyncio.sleep(0)
        if request.max_output_tokens == SHORT_TITLE_MAX_TOKENS:
            return request.content.split("\n")[1].upper()
        concept = request.content.split("\n")[0].removeprefix("Concept: ")
        return f"1. {concept} one\n2. {concept} two"


@pytest.mark.asyncio
async def test_many_concurrent_requests_keep_results_isolated():
    clear_traces()
    local, cloud = BackendIdentity.LOCAL, BackendIdentity.CLOUD_PRIMARY
    policy = RoutingPolicy(routes={kind: (local, cloud) for kind in TaskKind})
    orch = TaskOrchestrator({local: FlakyLocal(), cloud: SteadyCloud()}, policy)

    concepts = [f"c{n}" for n in range(200)]
    results = await asyncio.gather(*(orch.inspire(c) for c in concepts))

    for concept, result in zip(concepts, results):
        assert [i.text for i in result.ideas] == [f"{concept} one", f"{concept} two"]
        assert [i.title for i in result.ideas] == [f"{concept.upper()} ONE", f"{concept.upper()} TWO"]

    # The in-memory audit trail stays bounded.
    assert len(recent_traces(limit=10_000)) == 500
