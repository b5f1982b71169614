from __future__ import annotations

"""Capability protocol and execution data models.

A capability is the invocable unit a plan step refers to by name.

The executor resolves ``PlanStep.capability_name`` through a
``CapabilityRegistry`` and invokes the implementation with a
``CapabilityContext``.

Capabilities should:

- declare their parameters up front so plans can be validated before they run,
- return their value in ``CapabilityResult.output``,
- report failures as ``CapabilityResult(ok=False, error=...)`` rather than
  raising; the executor turns that into ``CapabilityInvocationError``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple, runtime_checkable

from ..backend.base import CompletionBackend
from ..schemas import FrozenSchema


class ParameterSpec(FrozenSchema):
    """Declared input parameter of a capability."""

    name: str
    description: str = ""
    type: str = "string"
    default: Optional[Any] = None
    required: bool = True


@dataclass(frozen=True)
class CapabilityContext:
    """Execution context passed to capability implementations.

    Attributes
    ----------
    goal:
        The free-text goal of the current run.
    variables:
        Read-only snapshot of the run context at the time the step starts.
    backend:
        Completion backend used by semantic capabilities, if configured.
    step_index:
        1-based index of the plan step being executed.
    """

    goal: str
    variables: Mapping[str, Any] = field(default_factory=dict)
    backend: Optional[CompletionBackend] = None
    step_index: int = 0


@dataclass(frozen=True)
class CapabilityResult:
    """Structured capability execution result."""

    ok: bool
    output: Any = None
    error: Optional[str] = None


@runtime_checkable
class Capability(Protocol):
    """Protocol for capability implementations."""

    name: str
    description: str
    parameters: Tuple[ParameterSpec, ...]
    output_schema: str

    @property
    def input_schema(self) -> Dict[str, str]: ...

    async def invoke(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult: ...


def schema_of(parameters: Tuple[ParameterSpec, ...]) -> Dict[str, str]:
    """Return the ``{parameter name: type}`` mapping for ``parameters``."""
    return {p.name: p.type for p in parameters}


def describe_capability(cap: Capability) -> str:
    """Render a one-line description of ``cap`` for planner prompts."""
    params = ", ".join(
        f"{p.name}: {p.type}" + ("" if p.required else " (optional)") + (f" - {p.description}" if p.description else "")
        for p in cap.parameters
    )
    return f"{cap.name}({params}) -> {cap.output_schema}: {cap.description}"
