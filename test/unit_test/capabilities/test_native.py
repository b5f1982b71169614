from __future__ import annotations

import asyncio
from typing import Annotated, Optional

import pytest

from skill_playground.capabilities.base import CapabilityContext
from skill_playground.capabilities.native import NativeCapability, collect_native_functions, native_function


class _MathPlugin:
    def __init__(self) -> None:
        self.calls = 0

    @native_function("Add two numbers")
    def add(
        self,
        a: Annotated[int, "First operand"],
        b: Annotated[int, "Second operand"] = 1,
    ) -> int:
        self.calls += 1
        return a + b

    @native_function("Sleep then echo")
    async def echo(self, input: str, delay: float = 0.0) -> str:
        await asyncio.sleep(delay)
        return input

    @native_function("Always fails")
    def boom(self, input: Optional[str] = None) -> str:
        raise RuntimeError("kaboom")


class _ChildPlugin(_MathPlugin):
    @native_function("Double a number")
    def double(self, x: int) -> int:
        return x * 2


def _ctx() -> CapabilityContext:
    return CapabilityContext(goal="g", step_index=1)


def _cap(name: str) -> NativeCapability:
    caps = {c.name: c for c in collect_native_functions(_MathPlugin(), "Math")}
    return caps[name]


def test_parameters_are_derived_from_signature() -> None:
    cap = _cap("Math.add")

    assert cap.description == "Add two numbers"
    assert cap.input_schema == {"a": "integer", "b": "integer"}
    assert cap.output_schema == "integer"
    a, b = cap.parameters
    assert a.required is True and a.description == "First operand"
    assert b.required is False and b.default == 1


@pytest.mark.asyncio
async def test_invoke_sync_function_runs_and_uses_defaults() -> None:
    res = await _cap("Math.add").invoke(_ctx(), args={"a": 2})
    assert res.ok is True
    assert res.output == 3


@pytest.mark.asyncio
async def test_invoke_async_function_is_awaited() -> None:
    res = await _cap("Math.echo").invoke(_ctx(), args={"input": "hi"})
    assert res.ok is True
    assert res.output == "hi"


@pytest.mark.asyncio
async def test_invoke_missing_required_argument_fails_without_calling() -> None:
    plugin = _MathPlugin()
    cap = next(c for c in collect_native_functions(plugin, "Math") if c.name == "Math.add")

    res = await cap.invoke(_ctx(), args={})

    assert res.ok is False
    assert res.error == "missing required argument(s): a"
    assert plugin.calls == 0


@pytest.mark.asyncio
async def test_invoke_exception_becomes_failed_result() -> None:
    res = await _cap("Math.boom").invoke(_ctx(), args={})
    assert res.ok is False
    assert res.error == "RuntimeError: kaboom"


def test_collect_includes_base_class_functions_first() -> None:
    names = [c.name for c in collect_native_functions(_ChildPlugin(), "Child")]
    assert names == ["Child.add", "Child.echo", "Child.boom", "Child.double"]


def test_from_callable_uses_docstring_when_no_description() -> None:
    def shout(text: str) -> str:
        """Shout the text.

        Longer explanation.
        """
        return text.upper()

    cap = NativeCapability.from_callable(shout, name="Util.shout")
    assert cap.description == "Shout the text."
    assert cap.input_schema == {"text": "string"}
