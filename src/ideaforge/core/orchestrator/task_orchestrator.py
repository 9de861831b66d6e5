from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable, Mapping
from time import perf_counter

from ideaforge.core.orchestrator.models import (
    AttemptRecord,
    CritiqueResult,
    GenerationRequest,
    Idea,
    InspireResult,
    RoutingOutcome,
    TaskKind,
    TextResult,
)
from ideaforge.core.orchestrator.parsing import clean_title, fallback_title, parse_numbered_list
from ideaforge.core.orchestrator.routing import RoutingPolicy
from ideaforge.core.prompts.builder import build_provider_request, build_short_title_request
from ideaforge.core.providers.base import BackendIdentity, ProviderAdapter, ProviderRequest
from ideaforge.core.runtime.errors import (
    AiServiceUnavailable,
    ErrorKind,
    IdeaForgeError,
    ParseFailure,
    compact_error_summary,
)
from ideaforge.core.telemetry.logging import get_logger
from ideaforge.core.telemetry.tracing import TraceContext, trace_event

CRITIQUE_POINTS = 3


def _new_id() -> str:
    return str(uuid.uuid4())


class TaskOrchestrator:
    """Walks a task's routing policy one backend at a time.

    Attempts within one request are strictly sequential; the first success
    ends the walk. Any exception from an adapter is recorded and routing
    moves on, so callers only ever see ``AiServiceUnavailable`` when every
    eligible backend has failed.
    """

    def __init__(
        self,
        adapters: Mapping[BackendIdentity, ProviderAdapter],
        policy: RoutingPolicy,
        *,
        logger=None,
        title_fallback_chars: int = 80,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self.adapters = adapters
        self.policy = policy
        self.logger = logger or get_logger("ideaforge.orchestrator")
        self.title_fallback_chars = title_fallback_chars
        self._new_id = id_factory

    async def route(self, task_kind: TaskKind, request: ProviderRequest, ctx: TraceContext) -> RoutingOutcome:
        outcome = RoutingOutcome(backend_used=None, succeeded=False)
        order = self.policy.for_task(task_kind)

        for index, identity in enumerate(order):
            adapter = self.adapters.get(identity)
            if adapter is None:
                continue
            started = perf_counter()
            try:
                text = await adapter.generate(request)
            except Exception as exc:  # noqa: BLE001
                elapsed = round((perf_counter() - started) * 1000, 2)
                summary = compact_error_summary(exc)
                outcome.backend_used = identity
                outcome.attempts.append(AttemptRecord(backend=identity, succeeded=False, latency_ms=elapsed, error=summary))
                trace_event(
                    self.logger,
                    ctx,
                    "backend_attempt",
                    "error",
                    {
                        "backend": identity.value,
                        "attempt_index": index,
                        "latency_ms": elapsed,
                        "error_kind": exc.kind.value if isinstance(exc, IdeaForgeError) else ErrorKind.INTERNAL.value,
                        "error": summary,
                    },
                )
                continue

            elapsed = round((perf_counter() - started) * 1000, 2)
            outcome.attempts.append(AttemptRecord(backend=identity, succeeded=True, latency_ms=elapsed))
            outcome.backend_used = identity
            outcome.succeeded = True
            outcome.output = text
            trace_event(
                self.logger,
                ctx,
                "backend_attempt",
                "ok",
                {"backend": identity.value, "attempt_index": index, "latency_ms": elapsed},
            )
            break

        if not outcome.succeeded:
            outcome.error = ErrorKind.AI_SERVICE_UNAVAILABLE

        trace_event(
            self.logger,
            ctx,
            "routing_outcome",
            "ok" if outcome.succeeded else "error",
            {
                "backend": outcome.backend_used.value if outcome.backend_used else None,
                "attempts": len(outcome.attempts),
                "policy": [b.value for b in order],
            },
        )
        return outcome

    async def run(self, request: GenerationRequest, *, request_id: str | None = None) -> RoutingOutcome:
        ctx = TraceContext(request_id=request_id or self._new_id(), task_kind=request.task_kind.value, domain=request.domain)
        return await self.route(request.task_kind, build_provider_request(request), ctx)

    async def _generate(self, request: GenerationRequest, ctx: TraceContext) -> tuple[str, BackendIdentity]:
        outcome = await self.route(request.task_kind, build_provider_request(request), ctx)
        return self._unwrap(outcome, request.task_kind)

    @staticmethod
    def _unwrap(outcome: RoutingOutcome, task_kind: TaskKind) -> tuple[str, BackendIdentity]:
        if not outcome.succeeded or outcome.backend_used is None:
            failures = [f"{a.backend.value}:{a.error}" for a in outcome.attempts]
            if not failures:
                message = f"no AI provider available for {task_kind.value}"
            else:
                message = f"all backends failed for {task_kind.value}: " + " | ".join(failures)
            raise AiServiceUnavailable(message, failures=failures)
        return outcome.output or "", outcome.backend_used

    def _context(self, request: GenerationRequest) -> TraceContext:
        return TraceContext(request_id=self._new_id(), task_kind=request.task_kind.value, domain=request.domain)

    async def short_title(self, item_text: str, ctx: TraceContext) -> str:
        title_ctx = TraceContext(request_id=ctx.request_id, task_kind=TaskKind.REFINE_TITLE.value, domain=ctx.domain)
        outcome = await self.route(TaskKind.REFINE_TITLE, build_short_title_request(item_text), title_ctx)
        text, _ = self._unwrap(outcome, TaskKind.REFINE_TITLE)
        return clean_title(text)

    async def _title_or_fallback(self, item_text: str, ctx: TraceContext) -> str:
        try:
            title = await self.short_title(item_text, ctx)
        except IdeaForgeError as exc:
            self.logger.warning("title_generation_failed", request_id=ctx.request_id, error=compact_error_summary(exc))
            title = ""
        return title or fallback_title(item_text, self.title_fallback_chars)

    async def inspire(self, content: str | None, domain: str | None = None) -> InspireResult:
        request = GenerationRequest.build(TaskKind.INSPIRE, content, domain)
        ctx = self._context(request)
        output, backend = await self._generate(request, ctx)

        items = [item for item in parse_numbered_list(output) if item]
        if not items:
            self.logger.warning("inspire_parse_empty", request_id=ctx.request_id, output=output[:100])
            raise ParseFailure("no items parsed from generated text")

        # gather keeps input order, so titles line up with items by index.
        titles = await asyncio.gather(*(self._title_or_fallback(item, ctx) for item in items))
        ideas = [Idea(id=self._new_id(), text=item, title=title) for item, title in zip(items, titles)]
        self.logger.info("inspire_success", request_id=ctx.request_id, item_count=len(ideas), backend=backend.value)
        return InspireResult(id=self._new_id(), raw=output, ideas=ideas, backend=backend)

    async def synthesize(self, concepts: list[str] | None, domain: str | None = None) -> TextResult:
        request = GenerationRequest.build(TaskKind.SYNTHESIZE, concepts, domain)
        ctx = self._context(request)
        output, backend = await self._generate(request, ctx)
        self.logger.info("synthesize_success", request_id=ctx.request_id, concept_count=len(request.inputs), backend=backend.value)
        return TextResult(id=self._new_id(), text=output.strip(), backend=backend)

    async def critique(self, content: str | None, domain: str | None = None) -> CritiqueResult:
        request = GenerationRequest.build(TaskKind.CRITIQUE, content, domain)
        ctx = self._context(request)
        output, backend = await self._generate(request, ctx)

        points = [item for item in parse_numbered_list(output) if item][:CRITIQUE_POINTS]
        if not points:
            self.logger.warning("critique_parse_empty", request_id=ctx.request_id, output=output[:100])
            raise ParseFailure("no critique points parsed from generated text")
        self.logger.info("critique_success", request_id=ctx.request_id, point_count=len(points), backend=backend.value)
        return CritiqueResult(id=self._new_id(), points=points, backend=backend)

    async def refine_title(self, content: str | None, domain: str | None = None) -> TextResult:
        request = GenerationRequest.build(TaskKind.REFINE_TITLE, content, domain)
        ctx = self._context(request)
        output, backend = await self._generate(request, ctx)
        self.logger.info("refine_title_success", request_id=ctx.request_id, backend=backend.value)
        return TextResult(id=self._new_id(), text=clean_title(output), backend=backend)
