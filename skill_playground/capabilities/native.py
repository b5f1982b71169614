from __future__ import annotations

"""Native (Python callable) capabilities.

Plugins are ordinary classes whose methods are marked with
``@native_function``. ``CapabilityRegistry.import_plugin`` turns every marked
method into a ``NativeCapability`` named ``Plugin.method``.

Parameter descriptions are read from ``Annotated[..., "description"]``
metadata. Sync callables run in a worker thread so they never block the event
loop; async callables are awaited directly.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Dict, List, Optional, Tuple, get_args, get_origin, get_type_hints

from .base import CapabilityContext, CapabilityResult, ParameterSpec, schema_of

logger = logging.getLogger(__name__)

_NATIVE_MARKER = "__native_function__"

_TYPE_NAMES = {str: "string", int: "integer", float: "number", bool: "boolean", dict: "object", list: "array"}


@dataclass(frozen=True)
class NativeFunctionInfo:
    """Metadata attached to a method by ``@native_function``."""

    name: Optional[str]
    description: str


def native_function(
    description: str = "", *, name: Optional[str] = None
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Mark a plugin method as an invocable capability.

    Args:
        description: Human readable description shown to the planner.
        name: Function name override; defaults to the method name.
    """

    def _decorate(fn: Callable[..., Any]) -> Callable[..., Any]:
        setattr(fn, _NATIVE_MARKER, NativeFunctionInfo(name=name, description=description))
        return fn

    return _decorate


def _type_name(annotation: Any) -> str:
    if get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    origin = get_origin(annotation) or annotation
    return _TYPE_NAMES.get(origin, "string")


def _description_of(annotation: Any) -> str:
    if get_origin(annotation) is Annotated:
        for meta in get_args(annotation)[1:]:
            if isinstance(meta, str):
                return meta
    return ""


def _return_type(hints: Dict[str, Any]) -> str:
    ret = hints.get("return")
    if ret is None or ret is type(None):
        return "string"
    return _type_name(ret)


def parameters_for(fn: Callable[..., Any]) -> Tuple[Tuple[ParameterSpec, ...], str]:
    """Derive parameter specs and the output type name from ``fn``'s signature."""
    sig = inspect.signature(fn)
    hints = get_type_hints(fn, include_extras=True)
    params: List[ParameterSpec] = []
    for p in sig.parameters.values():
        if p.name == "self" or p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        annotation = hints.get(p.name, str)
        has_default = p.default is not inspect.Parameter.empty
        params.append(
            ParameterSpec(
                name=p.name,
                description=_description_of(annotation),
                type=_type_name(annotation),
                default=p.default if has_default else None,
                required=not has_default,
            )
        )
    return tuple(params), _return_type(hints)


@dataclass(frozen=True)
class NativeCapability:
    """Capability backed by a Python callable."""

    name: str
    description: str
    parameters: Tuple[ParameterSpec, ...]
    fn: Callable[..., Any]
    output_schema: str = "string"

    @property
    def input_schema(self) -> Dict[str, str]:
        return schema_of(self.parameters)

    @classmethod
    def from_callable(cls, fn: Callable[..., Any], *, name: str, description: str = "") -> "NativeCapability":
        params, output = parameters_for(fn)
        doc = description or (inspect.getdoc(fn) or "").split("\n", 1)[0]
        return cls(name=name, description=doc, parameters=params, fn=fn, output_schema=output)

    async def invoke(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult:
        """
        Call the wrapped function with the declared arguments.

        Args:
            ctx: The execution context.
            args: Resolved arguments keyed by parameter name. Parameters not
                given here fall back to their defaults.

        Returns:
            CapabilityResult: The function's return value, or the error it raised.
        """
        kwargs: Dict[str, Any] = {}
        missing: List[str] = []
        for p in self.parameters:
            if p.name in args:
                kwargs[p.name] = args[p.name]
            elif p.required:
                missing.append(p.name)
        if missing:
            return CapabilityResult(ok=False, error=f"missing required argument(s): {', '.join(missing)}")

        try:
            if inspect.iscoroutinefunction(self.fn):
                value = await self.fn(**kwargs)
            else:
                value = await asyncio.to_thread(self.fn, **kwargs)
                if inspect.isawaitable(value):
                    value = await value
        except Exception as e:
            logger.debug(f"Native function '{self.name}' raised {type(e).__name__}: {e}")
            return CapabilityResult(ok=False, error=f"{type(e).__name__}: {e}")
        return CapabilityResult(ok=True, output=value)


def collect_native_functions(plugin: Any, plugin_name: str) -> List[NativeCapability]:
    """Build a ``NativeCapability`` for every ``@native_function`` method of ``plugin``.

    Methods are returned in declaration order, base classes first.
    """
    caps: List[NativeCapability] = []
    seen: set[str] = set()
    for klass in reversed(type(plugin).__mro__):
        for attr, raw in vars(klass).items():
            info: Optional[NativeFunctionInfo] = getattr(raw, _NATIVE_MARKER, None)
            if info is None or attr in seen:
                continue
            seen.add(attr)
            caps.append(
                NativeCapability.from_callable(
                    getattr(plugin, attr),
                    name=f"{plugin_name}.{info.name or attr}",
                    description=info.description,
                )
            )
    return caps
