from __future__ import annotations

"""Convenience factories for wiring skill_playground.

This module builds the capability registry, completion backend, planner and
orchestrator from ``Settings``. Everything is passed explicitly to the objects
that need it; nothing reads global state after construction.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from .backend import CompletionBackend, PydanticAICompletionBackend, build_completion_model
from .capabilities.loader import load_semantic_skills
from .capabilities.registry import CapabilityRegistry
from .core.config import Settings
from .planning.planner import PlannerConfig, PlannerStrategy, create_planner
from .plugins import HttpPlugin, KeyAndCertGenerator, SecretYamlUpdater
from .runtime import Executor
from .service import Orchestrator

logger = logging.getLogger(__name__)


def build_backend(settings: Settings, *, model: Any | None = None) -> CompletionBackend:
    """Build the completion backend from settings, or around ``model`` when given."""
    return PydanticAICompletionBackend(model if model is not None else build_completion_model(settings.completion))


def build_registry(settings: Settings, *, base_dir: Optional[Path] = None) -> CapabilityRegistry:
    """Build the ``CapabilityRegistry`` for the configured skills and plugins.

    Semantic skills are imported from ``settings.skills_root`` (relative to
    ``base_dir``, default the working directory). A missing root is only an
    error when ``settings.skill_plugins`` names plugins to import.
    Native plugins are imported according to the ``enable_*_plugin`` flags.
    """
    reg = CapabilityRegistry()

    root = Path(settings.skills_root)
    if not root.is_absolute():
        root = (base_dir or Path.cwd()) / root
    if root.is_dir() or settings.skill_plugins:
        load_semantic_skills(reg, root, settings.skill_plugins)
    else:
        logger.info(f"Skills root {root} does not exist; no semantic skills loaded")

    if settings.enable_http_plugin:
        reg.import_plugin(HttpPlugin(timeout=settings.http_timeout_seconds))
    if settings.enable_keygen_plugin:
        reg.import_plugin(KeyAndCertGenerator())
    if settings.enable_secrets_plugin:
        reg.import_plugin(SecretYamlUpdater())
    return reg


def build_orchestrator(
    settings: Settings,
    *,
    registry: Optional[CapabilityRegistry] = None,
    backend: Optional[CompletionBackend] = None,
    strategy: PlannerStrategy | str | None = None,
) -> Orchestrator:
    """Construct an ``Orchestrator`` from settings and optional overrides."""
    reg = registry if registry is not None else build_registry(settings)
    be = backend if backend is not None else build_backend(settings)
    planner = create_planner(
        strategy or settings.planner_strategy,
        backend=be,
        registry=reg,
        config=PlannerConfig(max_steps=settings.planner_max_steps),
    )
    return Orchestrator(planner=planner, executor=Executor(registry=reg, backend=be))
