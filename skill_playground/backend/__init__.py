"""Completion backend abstraction.

- ``CompletionBackend``: protocol with ``complete(prompt) -> text``.
- ``PydanticAICompletionBackend``: default implementation over Pydantic AI.
- ``build_completion_model``: maps ``CompletionConfig`` to a Pydantic AI model.
"""

from .base import CompletionBackend
from .pydantic_ai import PydanticAICompletionBackend, build_completion_model

__all__ = [
    "CompletionBackend",
    "PydanticAICompletionBackend",
    "build_completion_model",
]
