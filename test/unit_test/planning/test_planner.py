from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Annotated, List

import pytest

from skill_playground.backend.pydantic_ai import PydanticAICompletionBackend
from skill_playground.capabilities.native import native_function
from skill_playground.capabilities.registry import CapabilityRegistry
from skill_playground.errors import BackendError, PlanningError, PlanValidationError
from skill_playground.planning.planner import (
    ActionPlanner,
    PlannerConfig,
    PlannerStrategy,
    SequentialPlanner,
    create_planner,
)


class _Web:
    @native_function("Fetch a URL")
    def fetch(self, url: Annotated[str, "URL to fetch"]) -> str:
        return "body"


class _Writer:
    @native_function("Summarize text")
    def summarize(self, input: str) -> str:
        return input


@dataclass
class _ScriptedBackend:
    reply: str = ""
    error: Exception | None = None
    prompts: List[str] = field(default_factory=list)

    async def complete(self, prompt: str, *, settings=None) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


def _registry() -> CapabilityRegistry:
    reg = CapabilityRegistry()
    reg.import_plugin(_Web(), "Web")
    reg.import_plugin(_Writer(), "Writer")
    return reg


def _reply(*steps: dict) -> str:
    return json.dumps({"steps": list(steps)})


@pytest.mark.asyncio
async def test_sequential_planner_builds_validated_plan() -> None:
    backend = _ScriptedBackend(
        reply=_reply(
            {"capability": "Web.fetch", "args": {"url": "https://example.com"}},
            {"capability": "Writer.summarize", "args": {"input": "$step1.output"}},
        )
    )
    planner = SequentialPlanner(backend=backend, registry=_registry())

    plan = await planner.create_plan("Summarize https://example.com")

    assert plan.strategy == "sequential"
    assert [s.capability_name for s in plan.steps] == ["Web.fetch", "Writer.summarize"]
    assert plan.goal == "Summarize https://example.com"


@pytest.mark.asyncio
async def test_planner_prompt_lists_capabilities_and_goal() -> None:
    backend = _ScriptedBackend(reply=_reply({"capability": "Web.fetch", "args": {"url": "u"}}))
    planner = SequentialPlanner(backend=backend, registry=_registry())

    await planner.create_plan("  fetch u  ")

    prompt = backend.prompts[0]
    assert "- Web.fetch(url: string - URL to fetch) -> string: Fetch a URL" in prompt
    assert "- Writer.summarize(input: string) -> string: Summarize text" in prompt
    assert prompt.rstrip().endswith("fetch u")


@pytest.mark.asyncio
async def test_planner_exclusions_hide_capabilities() -> None:
    backend = _ScriptedBackend(reply=_reply({"capability": "Web.fetch", "args": {"url": "u"}}))
    planner = SequentialPlanner(
        backend=backend,
        registry=_registry(),
        config=PlannerConfig(excluded_plugins={"web"}),
    )

    with pytest.raises(PlanValidationError, match="unknown capability"):
        await planner.create_plan("fetch u")
    assert "Web.fetch" not in backend.prompts[0]


def test_planner_excluded_functions() -> None:
    planner = SequentialPlanner(
        backend=_ScriptedBackend(),
        registry=_registry(),
        config=PlannerConfig(excluded_functions={"summarize"}),
    )
    assert [c.name for c in planner.available_capabilities().list()] == ["Web.fetch"]


@pytest.mark.asyncio
async def test_planner_rejects_empty_goal_without_calling_backend() -> None:
    backend = _ScriptedBackend()
    planner = SequentialPlanner(backend=backend, registry=_registry())

    with pytest.raises(PlanningError, match="goal is empty"):
        await planner.create_plan("   ")
    assert backend.prompts == []


@pytest.mark.asyncio
async def test_planner_without_capabilities_fails() -> None:
    planner = SequentialPlanner(backend=_ScriptedBackend(), registry=CapabilityRegistry())
    with pytest.raises(PlanningError, match="no capabilities"):
        await planner.create_plan("anything")


@pytest.mark.asyncio
async def test_planner_backend_error_becomes_planning_error() -> None:
    backend = _ScriptedBackend(error=BackendError("completion failed: offline"))
    planner = SequentialPlanner(backend=backend, registry=_registry())

    with pytest.raises(PlanningError) as exc:
        await planner.create_plan("fetch u")
    assert exc.value.stage == "planning"
    assert isinstance(exc.value.__cause__, BackendError)


@pytest.mark.asyncio
async def test_planner_malformed_reply_is_planning_error() -> None:
    planner = SequentialPlanner(backend=_ScriptedBackend(reply="I think you should fetch it"), registry=_registry())
    with pytest.raises(PlanningError) as exc:
        await planner.create_plan("fetch u")
    assert not isinstance(exc.value, PlanValidationError)


@pytest.mark.asyncio
async def test_planner_enforces_max_steps() -> None:
    reply = _reply(*[{"capability": "Web.fetch", "args": {"url": "u"}} for _ in range(3)])
    planner = SequentialPlanner(
        backend=_ScriptedBackend(reply=reply), registry=_registry(), config=PlannerConfig(max_steps=2)
    )
    with pytest.raises(PlanValidationError):
        await planner.create_plan("fetch u three times")


@pytest.mark.asyncio
async def test_action_planner_returns_single_step_plan() -> None:
    backend = _ScriptedBackend(reply=_reply({"capability": "summarize", "args": {"input": "$goal"}}))
    planner = ActionPlanner(backend=backend, registry=_registry())

    plan = await planner.create_plan("shorten this")

    assert plan.strategy == "action"
    assert len(plan) == 1
    assert plan.steps[0].capability_name == "Writer.summarize"
    assert "exactly one step" in backend.prompts[0]


@pytest.mark.asyncio
async def test_action_planner_rejects_multiple_steps() -> None:
    backend = _ScriptedBackend(
        reply=_reply(
            {"capability": "Web.fetch", "args": {"url": "u"}},
            {"capability": "Writer.summarize"},
        )
    )
    planner = ActionPlanner(backend=backend, registry=_registry())
    with pytest.raises(PlanValidationError, match="exactly one capability"):
        await planner.create_plan("fetch and summarize")


@pytest.mark.asyncio
async def test_action_planner_empty_selection_is_planning_error() -> None:
    planner = ActionPlanner(backend=_ScriptedBackend(reply='{"steps": []}'), registry=_registry())
    with pytest.raises(PlanningError, match="no capability selected") as exc:
        await planner.create_plan("order a pizza")
    assert not isinstance(exc.value, PlanValidationError)


def test_create_planner_selects_variant() -> None:
    kwargs = {"backend": _ScriptedBackend(), "registry": _registry()}
    assert isinstance(create_planner(PlannerStrategy.sequential, **kwargs), SequentialPlanner)
    assert isinstance(create_planner("action", **kwargs), ActionPlanner)
    with pytest.raises(ValueError):
        create_planner("greedy", **kwargs)


@pytest.mark.asyncio
async def test_planner_with_function_model_backend() -> None:
    pytest.importorskip("pydantic_ai")
    from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
    from pydantic_ai.models.function import AgentInfo, FunctionModel

    seen: List[str] = []

    def _respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        seen.append(str(messages[-1]))
        return ModelResponse(
            parts=[TextPart("```json\n" + _reply({"capability": "Web.fetch", "args": {"url": "$goal"}}) + "\n```")]
        )

    backend = PydanticAICompletionBackend(FunctionModel(_respond))
    planner = SequentialPlanner(backend=backend, registry=_registry())

    plan = await planner.create_plan("https://example.com")

    assert len(seen) == 1
    assert plan.steps[0].capability_name == "Web.fetch"
    assert plan.steps[0].bound_arguments["url"].key == "goal"
