from __future__ import annotations

"""Run context, results and LangGraph state types.

- ``Context`` is the ordered variable mapping threaded through one run.
- ``ExecutionResult`` is what the executor hands back to callers.
- ``CancellationToken`` lets a caller stop a run between steps.
- ``_GraphState`` is the mutable state passed between LangGraph nodes.

Every run owns its own ``Context`` and ``_GraphState``; nothing here is shared
between concurrent runs.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, List, Mapping, NotRequired, Optional, Required, TypedDict

from ..errors import ExecutionFailed
from ..planning.steps import GOAL_KEY, INPUT_KEY, PlanStep


class ExecutionStatus(str, Enum):
    succeeded = "succeeded"
    failed = "failed"
    cancelled = "cancelled"


class Context(dict):
    """Ordered mapping of variable name to value for a single run."""

    @classmethod
    def seed(cls, goal: str, extra: Optional[Mapping[str, Any]] = None) -> "Context":
        """Create a context holding ``goal`` under both the goal and input keys."""
        ctx = cls()
        ctx[GOAL_KEY] = goal
        ctx[INPUT_KEY] = goal
        if extra:
            ctx.update(extra)
        return ctx

    def snapshot(self) -> Mapping[str, Any]:
        """Return a read-only copy of the current values."""
        return MappingProxyType(dict(self))


class CancellationToken:
    """Cooperative cancellation flag checked by the executor at step boundaries."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of executing a plan.

    Attributes
    ----------
    status:
        ``succeeded``, ``failed`` or ``cancelled``.
    final_value:
        Output of the last executed step on success, ``None`` otherwise.
    per_step_outputs:
        Outputs of the steps that completed, in plan order.
    variables:
        Read-only snapshot of the run context when execution stopped.
    failure:
        The ``ExecutionFailed`` error that aborted the run, if any.
    """

    status: ExecutionStatus
    final_value: Any = None
    per_step_outputs: List[Any] = field(default_factory=list)
    variables: Mapping[str, Any] = field(default_factory=dict)
    failure: Optional[ExecutionFailed] = None

    @property
    def succeeded(self) -> bool:
        return self.status == ExecutionStatus.succeeded

    @property
    def reason(self) -> Optional[str]:
        if self.failure is not None:
            return str(self.failure)
        if self.status == ExecutionStatus.cancelled:
            return "run cancelled"
        return None


class _GraphState(TypedDict):
    """Mutable LangGraph state for a single executor run.

    Required keys:

    - ``goal``: the goal text of the plan.
    - ``steps``: the validated plan steps.
    - ``idx``: current step index (0-based).
    - ``context``: the run ``Context``.
    - ``outputs``: outputs of completed steps.

    Optional keys:

    - ``cancel_token``: checked before each step.
    - ``_finished`` / ``_status`` / ``_failure``: used to terminate the graph.
    """

    goal: Required[str]
    steps: Required[List[PlanStep]]
    idx: Required[int]
    context: Required[Context]
    outputs: Required[List[Any]]
    cancel_token: NotRequired[Optional[CancellationToken]]
    _finished: NotRequired[bool]
    _status: NotRequired[str]
    _failure: NotRequired[Optional[ExecutionFailed]]
