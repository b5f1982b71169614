from __future__ import annotations

"""Planners that turn a free-text goal into a validated plan.

Responsibilities
----------------

- Describe the available capabilities to the completion backend.
- Parse the backend's reply into a ``RawPlan``.
- Validate the raw plan against the registry and return an executable ``Plan``.

The planner never executes capabilities. Two strategies are provided:

- ``SequentialPlanner``: multi-step decomposition of the goal.
- ``ActionPlanner``: selection of a single capability (a plan of length 1).

``create_planner`` selects the variant from a ``PlannerStrategy`` value so
callers do not need separate code paths per strategy.
"""

import logging
from enum import Enum
from typing import ClassVar, Optional, Set

from pydantic import Field

from ..backend.base import CompletionBackend
from ..capabilities.registry import CapabilityRegistry
from ..errors import BackendError, PlanningError, PlanValidationError
from ..schemas import BaseSchema
from .prompts import ACTION_PLANNER_PROMPT, PLAN_FORMAT, SEQUENTIAL_PLANNER_PROMPT
from .steps import Plan, RawPlan
from .validation import parse_raw_plan, validate_plan

logger = logging.getLogger(__name__)


class PlannerStrategy(str, Enum):
    sequential = "sequential"
    action = "action"


class PlannerConfig(BaseSchema):
    """Tunables shared by all planner strategies."""

    max_steps: int = 10
    excluded_plugins: Set[str] = Field(default_factory=set)
    excluded_functions: Set[str] = Field(default_factory=set)


class Planner:
    """Base planner: prompt the backend, parse the reply, validate the plan."""

    strategy: ClassVar[PlannerStrategy]
    prompt_template: ClassVar[str]

    def __init__(
        self,
        *,
        backend: CompletionBackend,
        registry: CapabilityRegistry,
        config: Optional[PlannerConfig] = None,
    ) -> None:
        """
        Initialize the planner.

        Args:
            backend: Completion backend asked to produce the raw plan.
            registry: Registry of capabilities the plan may use.
            config: Optional planner configuration (step limit, exclusions).
        """
        self._backend = backend
        self._registry = registry
        self._config = config or PlannerConfig()

    @property
    def config(self) -> PlannerConfig:
        return self._config

    def available_capabilities(self) -> CapabilityRegistry:
        """Return a registry restricted to the capabilities this planner may use."""
        excluded_plugins = {p.casefold() for p in self._config.excluded_plugins}
        excluded_functions = {f.casefold() for f in self._config.excluded_functions}
        view = CapabilityRegistry()
        for cap in self._registry.list():
            plugin, _, function = cap.name.rpartition(".")
            if plugin.casefold() in excluded_plugins:
                continue
            if function.casefold() in excluded_functions or cap.name.casefold() in excluded_functions:
                continue
            view.register(cap)
        return view

    def build_prompt(self, goal: str, available: CapabilityRegistry) -> str:
        return self.prompt_template.format(
            plan_format=PLAN_FORMAT,
            capabilities=available.describe() or "(none)",
            goal=goal.strip(),
        )

    def check_shape(self, raw: RawPlan) -> None:
        """Strategy-specific checks applied before validation."""

    async def create_plan(self, goal: str) -> Plan:
        """Generate a validated plan for ``goal``.

        Parameters
        ----------
        goal:
            The free-text goal to decompose.

        Returns
        -------
        Plan
            The validated plan.

        Raises
        ------
        PlanningError
            If the goal is empty, the backend fails, or its reply cannot be parsed.
        PlanValidationError
            If the parsed plan violates a validation rule.
        """
        if not goal.strip():
            raise PlanningError("goal is empty")

        available = self.available_capabilities()
        if len(available) == 0:
            raise PlanningError("no capabilities are available for planning")

        prompt = self.build_prompt(goal, available)
        logger.debug(f"Requesting {self.strategy.value} plan over {len(available)} capabilities")
        try:
            text = await self._backend.complete(prompt)
        except BackendError as e:
            raise PlanningError(str(e)) from e

        raw = parse_raw_plan(text)
        self.check_shape(raw)
        plan = validate_plan(
            raw,
            available,
            goal=goal,
            strategy=self.strategy.value,
            max_steps=self._config.max_steps,
        )
        logger.info(f"Created {self.strategy.value} plan with {len(plan)} step(s)")
        return plan


class SequentialPlanner(Planner):
    """Planner that decomposes a goal into an ordered multi-step plan."""

    strategy = PlannerStrategy.sequential
    prompt_template = SEQUENTIAL_PLANNER_PROMPT


class ActionPlanner(Planner):
    """Planner that selects exactly one capability for the goal."""

    strategy = PlannerStrategy.action
    prompt_template = ACTION_PLANNER_PROMPT

    def check_shape(self, raw: RawPlan) -> None:
        if not raw.steps:
            raise PlanningError("no capability selected for the goal")
        if len(raw.steps) > 1:
            raise PlanValidationError(f"action planner must select exactly one capability, got {len(raw.steps)}")


_STRATEGIES = {
    PlannerStrategy.sequential: SequentialPlanner,
    PlannerStrategy.action: ActionPlanner,
}


def create_planner(
    strategy: PlannerStrategy | str,
    *,
    backend: CompletionBackend,
    registry: CapabilityRegistry,
    config: Optional[PlannerConfig] = None,
) -> Planner:
    """Build the planner variant for ``strategy``.

    Raises:
        ValueError: If ``strategy`` is not a known ``PlannerStrategy``.
    """
    planner_cls = _STRATEGIES[PlannerStrategy(strategy)]
    return planner_cls(backend=backend, registry=registry, config=config)
