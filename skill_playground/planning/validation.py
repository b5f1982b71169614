from __future__ import annotations

"""Raw plan parsing and validation.

The completion backend's reply is untrusted. It is parsed into ``RawPlan`` and
then checked against the registry before a ``Plan`` is built:

- every capability name must resolve,
- every argument must be declared by the capability,
- every ``$reference`` must point at the goal context or at an earlier step
  (forward and self references are rejected, so plans are acyclic),
- output keys must be unique identifiers and must not shadow the goal key.

Reference syntax inside argument values: ``$input``, ``$step2``,
``$step2.output`` or ``$<output_key>``. A value starting with ``$$`` is a
literal string starting with ``$``.
"""

import json
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from ..capabilities.registry import CapabilityRegistry
from ..errors import NotFoundError, PlanningError, PlanValidationError
from .steps import SEED_KEYS, LiteralArg, Plan, PlanStep, RawPlan, RefArg

logger = logging.getLogger(__name__)

_REFERENCE = re.compile(r"^\$([A-Za-z_][A-Za-z0-9_]*)(?:\.output)?$")
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_STEP_ALIAS = re.compile(r"^step\d+$")


def _strip_fences(text: str) -> str:
    content = text.strip()
    if content.startswith("```"):
        content = content.split("\n", 1)[1] if "\n" in content else content[3:]
    if content.endswith("```"):
        content = content.rsplit("```", 1)[0]
    return content.strip()


def parse_raw_plan(text: str) -> RawPlan:
    """Parse the completion backend's reply into a ``RawPlan``.

    Markdown code fences are stripped. A top-level JSON array is accepted as
    the list of steps.

    Raises:
        PlanningError: If the reply is not valid JSON or does not match the schema.
    """
    content = _strip_fences(text)
    if not content:
        raise PlanningError("planner returned an empty response")
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise PlanningError(f"planner returned invalid JSON: {e.msg} at line {e.lineno}") from e
    if isinstance(data, list):
        data = {"steps": data}
    try:
        return RawPlan.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(p) for p in first.get("loc", ()))
        raise PlanningError(f"planner returned a malformed plan: {loc}: {first.get('msg')}") from e


def _bind_argument(
    value: Any,
    *,
    step_index: int,
    available: Dict[str, str],
    all_aliases: Dict[str, int],
) -> Union[LiteralArg, RefArg]:
    if not isinstance(value, str) or not value.startswith("$"):
        return LiteralArg(value=value)
    if value.startswith("$$"):
        return LiteralArg(value=value[1:])
    match = _REFERENCE.match(value)
    if match is None:
        return LiteralArg(value=value)

    name = match.group(1)
    if name in available:
        return RefArg(key=available[name])
    target = all_aliases.get(name)
    if target == step_index:
        raise PlanValidationError(f"self reference '{value}'", step_index=step_index)
    if target is not None:
        raise PlanValidationError(f"forward reference '{value}' to step {target}", step_index=step_index)
    raise PlanValidationError(f"unresolved reference '{value}'", step_index=step_index)


def validate_plan(
    raw: RawPlan,
    registry: CapabilityRegistry,
    *,
    goal: str,
    strategy: str = "sequential",
    max_steps: Optional[int] = None,
    context_keys: Iterable[str] = SEED_KEYS,
) -> Plan:
    """Validate ``raw`` against ``registry`` and build an executable ``Plan``.

    Args:
        raw: Parsed, untrusted plan.
        registry: Registry the plan's capability names must resolve in.
        goal: The goal text the plan was generated for.
        strategy: Name of the planner strategy that produced the plan.
        max_steps: Optional upper bound on the number of steps.
        context_keys: Keys present in the seed context before the first step.

    Raises:
        PlanValidationError: On the first rule the plan violates.
    """
    if not raw.steps:
        raise PlanValidationError("plan has no steps")
    if max_steps is not None and len(raw.steps) > max_steps:
        raise PlanValidationError(f"plan has {len(raw.steps)} steps; at most {max_steps} allowed")

    seed = set(context_keys)
    output_keys: List[str] = []
    for i, rs in enumerate(raw.steps, start=1):
        key = rs.output_key or f"step{i}"
        if not _IDENTIFIER.match(key):
            raise PlanValidationError(f"invalid output key '{key}'", step_index=i)
        if _STEP_ALIAS.match(key) and key != f"step{i}":
            raise PlanValidationError(f"output key '{key}' is reserved for another step", step_index=i)
        if key in seed:
            raise PlanValidationError(f"output key '{key}' shadows the goal context", step_index=i)
        if key in output_keys:
            raise PlanValidationError(f"duplicate output key '{key}'", step_index=i)
        output_keys.append(key)

    all_aliases: Dict[str, int] = {}
    for i, key in enumerate(output_keys, start=1):
        all_aliases[f"step{i}"] = i
        all_aliases[key] = i

    available: Dict[str, str] = {k: k for k in seed}
    steps: List[PlanStep] = []
    for i, rs in enumerate(raw.steps, start=1):
        try:
            cap = registry.lookup(rs.capability)
        except NotFoundError as e:
            raise PlanValidationError(f"unknown capability '{rs.capability}'", step_index=i) from e

        schema = cap.input_schema
        unknown = sorted(set(rs.args) - set(schema))
        if unknown:
            raise PlanValidationError(
                f"capability '{cap.name}' does not accept argument(s): {', '.join(unknown)}", step_index=i
            )

        bound = {
            name: _bind_argument(value, step_index=i, available=available, all_aliases=all_aliases)
            for name, value in rs.args.items()
        }
        key = output_keys[i - 1]
        steps.append(PlanStep(index=i, capability_name=cap.name, bound_arguments=bound, output_key=key))

        available[key] = key
        available[f"step{i}"] = key

    plan = Plan(goal=goal, steps=tuple(steps), strategy=strategy)
    logger.debug(f"Validated plan with {len(plan)} step(s)")
    return plan
