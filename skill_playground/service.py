from __future__ import annotations

"""High-level orchestration service.

``Orchestrator`` is the single entry point that turns a goal into a result
without callers wiring the planner and executor themselves.

Workflow
--------

- ``run``:

  1. Uses the configured ``Planner`` (sequential or action) to build a plan.
  2. Executes the plan with the ``Executor``.
  3. Returns both, so callers can show the plan next to the result.

- ``invoke_function``:

  Runs one named capability directly with the goal text as its ``input``,
  skipping the planner.

Planning and validation errors propagate unchanged. Execution failures are
reported on the returned ``ExecutionResult``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .planning.planner import Planner
from .planning.steps import INPUT_KEY, Plan, PlanStep, RefArg
from .runtime import CancellationToken, ExecutionResult, Executor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrchestrationOutcome:
    """Plan and execution result of one ``Orchestrator.run`` call."""

    plan: Plan
    result: ExecutionResult


class Orchestrator:
    """Orchestrate planning + execution for a single goal."""

    def __init__(self, *, planner: Planner, executor: Executor) -> None:
        self._planner = planner
        self._executor = executor

    @property
    def planner(self) -> Planner:
        return self._planner

    async def run(self, goal_text: str, *, cancel_token: Optional[CancellationToken] = None) -> OrchestrationOutcome:
        """Plan and execute ``goal_text``.

        Raises
        ------
        PlanningError
            If no plan could be produced.
        PlanValidationError
            If the produced plan was rejected. The executor is not invoked.
        """
        plan = await self._planner.create_plan(goal_text)
        result = await self._executor.execute(plan, cancel_token=cancel_token)
        logger.info(f"Run completed: status={result.status.value}")
        return OrchestrationOutcome(plan=plan, result=result)

    async def invoke_function(self, function: str, goal_text: str) -> ExecutionResult:
        """Run the capability ``function`` once with ``goal_text`` as its input.

        Raises:
            NotFoundError: If ``function`` is not registered.
        """
        cap = self._executor.registry.lookup(function)
        bound = {INPUT_KEY: RefArg(key=INPUT_KEY)} if INPUT_KEY in cap.input_schema else {}
        plan = Plan(
            goal=goal_text,
            steps=(PlanStep(index=1, capability_name=cap.name, bound_arguments=bound, output_key="step1"),),
            strategy="direct",
        )
        return await self._executor.execute(plan)
