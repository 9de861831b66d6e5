from __future__ import annotations

from ideaforge.core.orchestrator.models import GenerationRequest, TaskKind
from ideaforge.core.prompts.personas import SHORT_TITLE_INSTRUCTION, persona_for
from ideaforge.core.providers.base import ProviderRequest

MAX_TOKENS: dict[TaskKind, int] = {
    TaskKind.INSPIRE: 1000,
    TaskKind.SYNTHESIZE: 200,
    TaskKind.CRITIQUE: 200,
    TaskKind.REFINE_TITLE: 40,
}
SHORT_TITLE_MAX_TOKENS = 60


def _numbered(values: tuple[str, ...]) -> str:
    return "\n".join(f"{i}. {value}" for i, value in enumerate(values, start=1))


def build_provider_request(request: GenerationRequest) -> ProviderRequest:
    persona = persona_for(request.domain)
    kind = request.task_kind

    if kind is TaskKind.INSPIRE:
        instruction = persona.inspire
        content = (
            f"Concept: {request.inputs[0]}\n\n"
            "Respond format strictly:\n"
            "1. Idea one (<= 2 sentences)\n"
            "2. Idea two (<= 2 sentences)\n"
            "3. Idea three (<= 2 sentences)"
        )
    elif kind is TaskKind.SYNTHESIZE:
        instruction = persona.synthesize
        content = f"Concepts:\n{_numbered(request.inputs)}\n\nOutput: one short cohesive paragraph (<= 6 sentences)."
    elif kind is TaskKind.CRITIQUE:
        instruction = persona.critique
        content = f"Concept:\n{request.inputs[0]}\n\nOutput format:\n1. [Flaw/Risk]\n2. [Flaw/Risk]\n3. [Flaw/Risk]"
    else:
        instruction = persona.refine
        content = f"Long-form idea:\n{request.inputs[0]}\n\nOutput: title only (<= 8 words)."

    return ProviderRequest(instruction=instruction, content=content, max_output_tokens=MAX_TOKENS[kind])


def build_short_title_request(item_text: str) -> ProviderRequest:
    return ProviderRequest(
        instruction=SHORT_TITLE_INSTRUCTION,
        content=f"Long-form idea:\n{item_text}\n\nRespond with only the title (max 8 words).",
        max_output_tokens=SHORT_TITLE_MAX_TOKENS,
    )
