from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ideaforge.core.providers.base import BackendIdentity
from ideaforge.core.runtime.errors import ErrorCode, ErrorKind, InputValidationError


class TaskKind(str, Enum):
    INSPIRE = "inspire"
    SYNTHESIZE = "synthesize"
    CRITIQUE = "critique"
    REFINE_TITLE = "refine_title"


MIN_SYNTHESIS_CONCEPTS = 2
MAX_SYNTHESIS_CONCEPTS = 3


@dataclass(slots=True, frozen=True)
class GenerationRequest:
    task_kind: TaskKind
    domain: str
    inputs: tuple[str, ...]

    def __post_init__(self) -> None:
        if self.task_kind is TaskKind.SYNTHESIZE:
            count = len(self.inputs)
            if not MIN_SYNTHESIS_CONCEPTS <= count <= MAX_SYNTHESIS_CONCEPTS:
                raise InputValidationError("Provide 2 or 3 concepts", code=ErrorCode.INVALID_INPUT)
            if any(not isinstance(c, str) or not c.strip() for c in self.inputs):
                raise InputValidationError("Concepts must be non-empty strings", code=ErrorCode.INVALID_INPUT)
        else:
            if len(self.inputs) > 1:
                raise InputValidationError("Exactly one content value is required", code=ErrorCode.INVALID_INPUT)
            content = self.inputs[0] if self.inputs else None
            if not isinstance(content, str) or not content.strip():
                raise InputValidationError("Missing content", code=ErrorCode.MISSING_CONTENT)

    @classmethod
    def build(cls, task_kind: TaskKind, inputs: list[str] | tuple[str, ...] | str | None, domain: str | None = None) -> GenerationRequest:
        if inputs is None:
            values: tuple[str, ...] = ()
        elif isinstance(inputs, str):
            values = (inputs,)
        else:
            values = tuple(inputs)
        return cls(task_kind=task_kind, domain=(domain or "general").strip() or "general", inputs=values)


@dataclass(slots=True, frozen=True)
class AttemptRecord:
    backend: BackendIdentity
    succeeded: bool
    latency_ms: float
    error: str | None = None


@dataclass(slots=True)
class RoutingOutcome:
    backend_used: BackendIdentity | None
    succeeded: bool
    output: str | None = None
    error: ErrorKind | None = None
    attempts: list[AttemptRecord] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class Idea:
    id: str
    text: str
    title: str


@dataclass(slots=True, frozen=True)
class InspireResult:
    id: str
    raw: str
    ideas: list[Idea]
    backend: BackendIdentity


@dataclass(slots=True, frozen=True)
class TextResult:
    id: str
    text: str
    backend: BackendIdentity


@dataclass(slots=True, frozen=True)
class CritiqueResult:
    id: str
    points: list[str]
    backend: BackendIdentity
