"""Error types for the skill playground.

Defines a small hierarchy of exceptions raised by the registry, the planner and
the executor. Callers can catch ``SkillPlaygroundError`` to handle every core
failure, or a specific subclass to tell the failing stage apart.
"""

from __future__ import annotations

from typing import Optional


class SkillPlaygroundError(Exception):
    """Base error for all skill playground exceptions."""


class RegistryError(SkillPlaygroundError):
    """Base error for capability registry failures."""


class DuplicateNameError(RegistryError):
    """Raised when a capability name is registered twice."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Capability already registered: '{name}'")
        self.name = name


class NotFoundError(RegistryError):
    """Raised when a capability name cannot be resolved."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Capability not found: '{name}'")
        self.name = name


class SkillLoadError(SkillPlaygroundError):
    """Raised when semantic skills cannot be imported from disk."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"Failed to load skills from '{path}': {message}")
        self.path = path


class BackendError(SkillPlaygroundError):
    """Raised when the completion backend fails to produce text."""


class PlanningError(SkillPlaygroundError):
    """Raised when no plan can be produced for a goal."""

    stage = "planning"


class PlanValidationError(PlanningError):
    """Raised when a candidate plan is rejected before execution."""

    stage = "validation"

    def __init__(self, message: str, *, step_index: Optional[int] = None) -> None:
        if step_index is not None:
            message = f"step {step_index}: {message}"
        super().__init__(message)
        self.step_index = step_index


class PlanAlreadyConsumedError(PlanValidationError):
    """Raised when a plan is handed to the executor a second time."""


class CapabilityInvocationError(SkillPlaygroundError):
    """Raised for an unsuccessful capability invocation within a plan step."""

    def __init__(self, capability: str, step_index: int, message: str) -> None:
        super().__init__(f"Capability '{capability}' failed at step {step_index}: {message}")
        self.capability = capability
        self.step_index = step_index
        self.reason = message


class ExecutionFailed(SkillPlaygroundError):
    """Wraps the first ``CapabilityInvocationError`` that aborted a run."""

    stage = "execution"

    def __init__(self, cause: CapabilityInvocationError) -> None:
        super().__init__(str(cause))
        self.cause = cause
