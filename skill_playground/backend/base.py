"""Completion backend protocol.

The completion backend is the single text-generation seam of the system. The
planner calls it to obtain a raw candidate plan and semantic capabilities call
it to render their prompt templates into an answer.

Implementations must raise ``BackendError`` for any failure so callers can
surface it as a planning or invocation failure.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from pydantic_ai.settings import ModelSettings


@runtime_checkable
class CompletionBackend(Protocol):
    """Protocol for text completion services."""

    async def complete(self, prompt: str, *, settings: Optional[ModelSettings] = None) -> str:
        """Return the completion text for ``prompt``."""

        ...
