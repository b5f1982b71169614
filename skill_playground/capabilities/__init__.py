"""Capability registry and capability implementations.

 A *capability* is the invocable unit a plan step names.

 - The planner lists the registry so the completion backend knows which
   capabilities exist.
 - Plan validation resolves every step's capability name through
   ``CapabilityRegistry`` before anything runs.
 - The executor invokes the capability with a ``CapabilityContext``.

 Two implementations ship with the package:

 - ``NativeCapability``: a Python callable marked with ``@native_function``.
 - ``SemanticCapability``: a prompt template loaded from the skills directory
   and completed by the backend.
 """

from .base import Capability, CapabilityContext, CapabilityResult, ParameterSpec
from .loader import load_semantic_skills
from .native import NativeCapability, native_function
from .registry import CapabilityRegistry, CapabilityView
from .semantic import SemanticCapability, render_template

__all__ = [
    "Capability",
    "CapabilityContext",
    "CapabilityRegistry",
    "CapabilityResult",
    "CapabilityView",
    "NativeCapability",
    "ParameterSpec",
    "SemanticCapability",
    "load_semantic_skills",
    "native_function",
    "render_template",
]
