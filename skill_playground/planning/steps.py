from __future__ import annotations

"""Plan and step schemas.

Two layers of models live here:

- ``RawPlan`` / ``RawPlanStep`` mirror what the completion backend is asked to
  return. They are parsed from untrusted text and never executed directly.
- ``Plan`` / ``PlanStep`` are the validated, executable form produced by
  ``validate_plan``. Every argument is either a ``LiteralArg`` or a ``RefArg``
  pointing at the goal context or at an earlier step's output key.
"""

import re
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import Field, PrivateAttr

from ..errors import PlanAlreadyConsumedError
from ..schemas import BaseSchema, FrozenSchema

GOAL_KEY = "goal"
INPUT_KEY = "input"
SEED_KEYS = (GOAL_KEY, INPUT_KEY)

_SENSITIVE_MARKERS = ("key", "secret", "password", "token")


class RawPlanStep(BaseSchema):
    capability: str
    args: Dict[str, Any] = Field(default_factory=dict)
    output_key: Optional[str] = None


class RawPlan(BaseSchema):
    steps: List[RawPlanStep] = Field(default_factory=list)
    rationale: Optional[str] = None


class LiteralArg(FrozenSchema):
    kind: Literal["literal"] = "literal"
    value: Any = None


class RefArg(FrozenSchema):
    kind: Literal["ref"] = "ref"
    key: str


BoundArgument = Annotated[Union[LiteralArg, RefArg], Field(discriminator="kind")]


class PlanStep(FrozenSchema):
    index: int
    capability_name: str
    bound_arguments: Dict[str, BoundArgument] = Field(default_factory=dict)
    output_key: str


def _is_sensitive(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in _SENSITIVE_MARKERS)


def _render_arg(name: str, arg: Union[LiteralArg, RefArg]) -> str:
    if isinstance(arg, RefArg):
        return f"{name}=${arg.key}"
    if _is_sensitive(name):
        return f"{name}=***"
    value = arg.value
    if isinstance(value, str):
        value = re.sub(r"\s+", " ", value)
        if len(value) > 80:
            value = value[:77] + "..."
        return f'{name}="{value}"'
    return f"{name}={value!r}"


class Plan(FrozenSchema):
    """Validated, ordered sequence of capability invocations for one goal.

    A plan is consumed exactly once: the executor calls ``mark_consumed``
    before running the first step.
    """

    goal: str
    steps: Tuple[PlanStep, ...]
    strategy: str = "sequential"

    _consumed: bool = PrivateAttr(default=False)

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def mark_consumed(self) -> None:
        """Flag the plan as handed to an executor.

        Raises:
            PlanAlreadyConsumedError: If the plan was already consumed.
        """
        if self._consumed:
            raise PlanAlreadyConsumedError("plan has already been executed")
        self._consumed = True

    def to_safe_string(self) -> str:
        """Render the plan for display, masking sensitive literal arguments."""
        goal = re.sub(r"\s+", " ", self.goal).strip()
        if len(goal) > 120:
            goal = goal[:117] + "..."
        lines = [f"Goal: {goal}"]
        for step in self.steps:
            args = ", ".join(_render_arg(n, a) for n, a in step.bound_arguments.items())
            lines.append(f"  {step.index}. {step.capability_name}({args}) -> ${step.output_key}")
        return "\n".join(lines)
