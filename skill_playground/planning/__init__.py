"""Planning components.

 The planning subsystem turns a free-text goal into an executable ``Plan``.

 Output model
 ------------

 - The completion backend's reply is parsed into ``RawPlan`` (untrusted).
 - ``validate_plan`` checks capability names, declared arguments and
   backward-only references, then builds an immutable ``Plan`` of
   ``PlanStep`` items.

 The planner itself does not execute capabilities; plans are consumed by
 ``skill_playground.runtime.Executor``.
 """

from .planner import (
    ActionPlanner,
    Planner,
    PlannerConfig,
    PlannerStrategy,
    SequentialPlanner,
    create_planner,
)
from .steps import GOAL_KEY, INPUT_KEY, LiteralArg, Plan, PlanStep, RawPlan, RawPlanStep, RefArg
from .validation import parse_raw_plan, validate_plan

__all__ = [
    "ActionPlanner",
    "GOAL_KEY",
    "INPUT_KEY",
    "LiteralArg",
    "Plan",
    "PlanStep",
    "Planner",
    "PlannerConfig",
    "PlannerStrategy",
    "RawPlan",
    "RawPlanStep",
    "RefArg",
    "SequentialPlanner",
    "create_planner",
    "parse_raw_plan",
    "validate_plan",
]
