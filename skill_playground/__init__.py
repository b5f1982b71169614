"""skill_playground.

A small harness that turns a free-text goal into an ordered plan of skill
invocations and executes it.

High-level architecture
-----------------------

- **Capabilities** are named, invocable units with a declared input contract.
  Semantic capabilities are prompt templates loaded from a skills directory;
  native capabilities are Python methods marked with ``@native_function``.
- **Planner** asks a completion backend to decompose the goal, parses the
  reply as untrusted data and validates it against the registry.
- **Executor** runs the validated plan step by step with LangGraph, threading
  each step's output into the context of the following steps.
- **Orchestrator** ties planner and executor together behind ``run(goal)``.

Typical workflow
----------------

Most integrations should use ``skill_playground.factory.build_orchestrator``:

1. Load ``Settings`` from the environment.
2. Build the orchestrator (registry, backend, planner, executor).
3. ``await orchestrator.run(goal)`` and inspect ``outcome.plan`` and
   ``outcome.result``.
"""

from .capabilities import CapabilityRegistry, native_function
from .errors import (
    CapabilityInvocationError,
    DuplicateNameError,
    ExecutionFailed,
    NotFoundError,
    PlanningError,
    PlanValidationError,
)
from .planning import Plan, PlannerStrategy
from .runtime import ExecutionResult, ExecutionStatus, Executor
from .service import OrchestrationOutcome, Orchestrator

__all__ = [
    "CapabilityInvocationError",
    "CapabilityRegistry",
    "DuplicateNameError",
    "ExecutionFailed",
    "ExecutionResult",
    "ExecutionStatus",
    "Executor",
    "NotFoundError",
    "OrchestrationOutcome",
    "Orchestrator",
    "Plan",
    "PlanValidationError",
    "PlannerStrategy",
    "PlanningError",
    "native_function",
]
