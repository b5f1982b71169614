from __future__ import annotations

"""Semantic (prompt template) capabilities.

A semantic capability renders a prompt template against the step arguments and
the run context, then asks the completion backend for the answer.

Template syntax is intentionally small: ``{{$name}}`` (optionally with spaces
inside the braces) is replaced with the value of ``name``. Function-call blocks
such as ``{{Plugin.Function $x}}`` are left untouched.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic_ai.settings import ModelSettings

from ..errors import BackendError
from .base import CapabilityContext, CapabilityResult, ParameterSpec, schema_of

logger = logging.getLogger(__name__)

_VARIABLE = re.compile(r"\{\{\s*\$([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


def render_template(template: str, variables: Mapping[str, Any]) -> str:
    """Substitute ``{{$name}}`` blocks in ``template`` with ``variables``.

    Unknown variables render as an empty string.
    """

    def _sub(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in variables:
            logger.warning(f"Template variable '{key}' is not defined; rendering empty string")
            return ""
        value = variables[key]
        return "" if value is None else str(value)

    return _VARIABLE.sub(_sub, template)


def template_variables(template: str) -> Tuple[str, ...]:
    """Return the variable names referenced by ``template`` in order of first use."""
    seen: Dict[str, None] = {}
    for m in _VARIABLE.finditer(template):
        seen.setdefault(m.group(1), None)
    return tuple(seen)


@dataclass(frozen=True)
class SemanticCapability:
    """Capability backed by a prompt template and the completion backend."""

    name: str
    description: str
    template: str
    parameters: Tuple[ParameterSpec, ...] = ()
    completion_settings: Optional[ModelSettings] = field(default=None, hash=False, compare=False)
    output_schema: str = "string"

    @property
    def input_schema(self) -> Dict[str, str]:
        return schema_of(self.parameters)

    def render(self, variables: Mapping[str, Any], args: Mapping[str, Any]) -> str:
        """Render the template.

        Values are taken from ``args`` first, then from the run context
        ``variables``, then from the parameter defaults.
        """
        merged: Dict[str, Any] = {p.name: p.default for p in self.parameters if p.default is not None}
        merged.update(variables)
        merged.update(args)
        return render_template(self.template, merged)

    async def invoke(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult:
        """
        Render the prompt and complete it.

        Args:
            ctx: The execution context. ``ctx.backend`` must be set.
            args: Template variables bound by the plan step.

        Returns:
            CapabilityResult: The completion text, or the backend error.
        """
        if ctx.backend is None:
            return CapabilityResult(ok=False, error="completion backend not configured")

        prompt = self.render(ctx.variables, args)
        logger.debug(f"Invoking semantic function '{self.name}' (prompt_chars={len(prompt)})")
        try:
            text = await ctx.backend.complete(prompt, settings=self.completion_settings)
        except BackendError as e:
            return CapabilityResult(ok=False, error=str(e))
        return CapabilityResult(ok=True, output=text.strip())
