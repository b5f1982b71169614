from __future__ import annotations

"""LangGraph plan executor.

``Executor`` runs a validated ``Plan`` produced by the planning subsystem.

Execution model
--------------

- The executor runs a LangGraph state machine over a mutable ``_GraphState``.
- Each visit of the ``execute`` node runs exactly one plan step at ``idx``.
- Steps run strictly in order; each step may read every value written by the
  steps before it.

Per step
--------

1. Check the cancellation token (cancellation only happens between steps).
2. Resolve bound arguments: literals as-is, references from the run context.
3. Invoke the capability with a read-only snapshot of the context.
4. Write the output under the step's output key and refresh ``input``.

The first failed invocation aborts the run. Outputs of completed steps are
kept on the result; side effects they performed are not undone.
"""

import logging
from typing import Any, Dict, Optional

from langgraph.graph import END, StateGraph

from ..backend.base import CompletionBackend
from ..capabilities.base import CapabilityContext, CapabilityResult
from ..capabilities.registry import CapabilityRegistry
from ..errors import CapabilityInvocationError, ExecutionFailed, NotFoundError
from ..planning.steps import INPUT_KEY, Plan, PlanStep, RefArg
from .models import CancellationToken, Context, ExecutionResult, ExecutionStatus, _GraphState

logger = logging.getLogger(__name__)


class Executor:
    """Execute a validated plan against the capability registry.

    The executor holds no per-run state, so a single instance can serve
    concurrent runs.
    """

    def __init__(self, *, registry: CapabilityRegistry, backend: Optional[CompletionBackend] = None) -> None:
        """
        Initialize the Executor.

        Args:
            registry: Registry used to resolve each step's capability.
            backend: Completion backend handed to semantic capabilities.
        """
        self._registry = registry
        self._backend = backend
        self._graph = self._build_graph()

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_GraphState)
        g.add_node("start", self._node_start)
        g.add_node("execute", self._node_execute_next)
        g.add_node("finish", self._node_finish)

        g.set_entry_point("start")
        g.add_edge("start", "execute")

        g.add_conditional_edges(
            "execute",
            self._route_after_execute,
            {
                "finish": "finish",
                "continue": "execute",
            },
        )
        g.add_edge("finish", END)
        return g.compile()

    async def execute(
        self,
        plan: Plan,
        context: Optional[Context] = None,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ExecutionResult:
        """Run ``plan`` and return its result.

        Args:
            plan: A validated plan. It is consumed by this call.
            context: Optional seed context; defaults to ``Context.seed(plan.goal)``.
            cancel_token: Optional token checked before each step.

        Raises:
            PlanAlreadyConsumedError: If ``plan`` was executed before.
        """
        plan.mark_consumed()
        ctx = Context.seed(plan.goal, context)
        state: _GraphState = {
            "goal": plan.goal,
            "steps": list(plan.steps),
            "idx": 0,
            "context": ctx,
            "outputs": [],
            "cancel_token": cancel_token,
        }
        logger.info(f"Executing {plan.strategy} plan with {len(plan)} step(s)")
        final = await self._graph.ainvoke(state, config={"recursion_limit": len(plan) + 5})

        status = ExecutionStatus(final.get("_status") or ExecutionStatus.succeeded.value)
        outputs = list(final["outputs"])
        return ExecutionResult(
            status=status,
            final_value=outputs[-1] if status == ExecutionStatus.succeeded and outputs else None,
            per_step_outputs=outputs,
            variables=final["context"].snapshot(),
            failure=final.get("_failure"),
        )

    def _resolve_arguments(self, step: PlanStep, context: Context) -> Dict[str, Any]:
        args: Dict[str, Any] = {}
        for name, arg in step.bound_arguments.items():
            if isinstance(arg, RefArg):
                args[name] = context.get(arg.key)
            else:
                args[name] = arg.value
        return args

    async def _node_start(self, state: _GraphState) -> _GraphState:
        """Graph entry node. Currently a no-op."""
        return state

    async def _node_execute_next(self, state: _GraphState) -> _GraphState:
        """Execute the next plan step.

        This node is responsible for:

        - detecting terminal conditions (idx >= len(steps), cancellation),
        - invoking the step's capability,
        - recording the output or the failure.
        """
        steps = state["steps"]
        idx = int(state.get("idx") or 0)
        if idx >= len(steps):
            state["_finished"] = True
            state["_status"] = ExecutionStatus.succeeded.value
            return state

        token = state.get("cancel_token")
        if token is not None and token.cancelled:
            logger.info(f"Run cancelled before step {idx + 1}")
            state["_finished"] = True
            state["_status"] = ExecutionStatus.cancelled.value
            return state

        step = steps[idx]
        context = state["context"]
        args = self._resolve_arguments(step, context)
        ctx = CapabilityContext(
            goal=state["goal"],
            variables=context.snapshot(),
            backend=self._backend,
            step_index=step.index,
        )

        logger.debug(f"Step {step.index}: invoking '{step.capability_name}' with args={sorted(args)}")
        try:
            cap = self._registry.lookup(step.capability_name)
            res = await cap.invoke(ctx, args=args)
        except NotFoundError as e:
            res = CapabilityResult(ok=False, error=str(e))
        except Exception as e:
            res = CapabilityResult(ok=False, error=f"{type(e).__name__}: {e}")

        if not res.ok:
            cause = CapabilityInvocationError(step.capability_name, step.index, res.error or "capability failed")
            logger.warning(str(cause))
            state["_failure"] = ExecutionFailed(cause)
            state["_finished"] = True
            state["_status"] = ExecutionStatus.failed.value
            return state

        context[step.output_key] = res.output
        context[INPUT_KEY] = res.output
        state["outputs"].append(res.output)
        state["idx"] = idx + 1
        logger.debug(f"Step {step.index}: stored output under '{step.output_key}'")
        return state

    async def _node_finish(self, state: _GraphState) -> _GraphState:
        """Finish node. Logs the terminal status."""
        status = str(state.get("_status") or ExecutionStatus.succeeded.value)
        logger.info(f"Run finished: status={status} completed_steps={len(state['outputs'])}")
        return state

    def _route_after_execute(self, state: _GraphState) -> str:
        """Route to finish/continue after executing a step."""
        if state.get("_finished"):
            return "finish"
        return "continue"
