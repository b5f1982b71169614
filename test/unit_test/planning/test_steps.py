from __future__ import annotations

import pytest
from pydantic import ValidationError

from skill_playground.errors import PlanAlreadyConsumedError, PlanValidationError
from skill_playground.planning.steps import LiteralArg, Plan, PlanStep, RefArg


def _plan() -> Plan:
    return Plan(
        goal="Rotate   the TLS\ncertificate",
        steps=(
            PlanStep(
                index=1,
                capability_name="KeyAndCertGenerator.generate_self_signed_certificate",
                bound_arguments={"common_name": LiteralArg(value="svc.local"), "days_valid": LiteralArg(value=30)},
                output_key="cert",
            ),
            PlanStep(
                index=2,
                capability_name="SecretYamlUpdater.update_secret",
                bound_arguments={
                    "path": LiteralArg(value="secret.yaml"),
                    "key": LiteralArg(value="tls.key"),
                    "value": RefArg(key="cert"),
                },
                output_key="step2",
            ),
        ),
    )


def test_plan_is_immutable() -> None:
    plan = _plan()
    with pytest.raises(ValidationError):
        plan.goal = "other"  # type: ignore[misc]
    with pytest.raises(ValidationError):
        plan.steps[0].output_key = "x"  # type: ignore[misc]


def test_plan_can_only_be_consumed_once() -> None:
    plan = _plan()
    plan.mark_consumed()
    assert plan.consumed is True

    with pytest.raises(PlanAlreadyConsumedError) as exc:
        plan.mark_consumed()
    assert isinstance(exc.value, PlanValidationError)


def test_to_safe_string_masks_sensitive_literals() -> None:
    text = _plan().to_safe_string()

    assert text.splitlines() == [
        "Goal: Rotate the TLS certificate",
        '  1. KeyAndCertGenerator.generate_self_signed_certificate(common_name="svc.local", days_valid=30) -> $cert',
        '  2. SecretYamlUpdater.update_secret(path="secret.yaml", key=***, value=$cert) -> $step2',
    ]


def test_to_safe_string_truncates_long_literals() -> None:
    plan = Plan(
        goal="g",
        steps=(
            PlanStep(
                index=1,
                capability_name="Http.post",
                bound_arguments={"body": LiteralArg(value="x" * 200)},
                output_key="step1",
            ),
        ),
    )
    line = plan.to_safe_string().splitlines()[1]
    assert 'body="' + "x" * 77 + '..."' in line


def test_bound_argument_union_round_trips_from_dict() -> None:
    step = PlanStep.model_validate(
        {
            "index": 1,
            "capability_name": "A.b",
            "bound_arguments": {"x": {"kind": "ref", "key": "input"}, "y": {"kind": "literal", "value": 2}},
            "output_key": "step1",
        }
    )
    assert step.bound_arguments == {"x": RefArg(key="input"), "y": LiteralArg(value=2)}
