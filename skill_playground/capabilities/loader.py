"""Semantic skill loader.

Skills live on disk, one directory per plugin and one sub-directory per
function::

    <skills_root>/
        WriterPlugin/
            Summarize/
                skprompt.txt
                config.json

``skprompt.txt`` holds the prompt template. ``config.json`` is optional and
describes the function, its input parameters and completion settings::

    {
      "description": "Summarize the input text",
      "completion": {"max_tokens": 256, "temperature": 0.0},
      "input": {"parameters": [{"name": "input", "description": "...", "defaultValue": ""}]}
    }

Parameters referenced by the template but not declared in ``config.json`` are
added as optional string parameters so planners can still bind them.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_ai.settings import ModelSettings

from ..errors import SkillLoadError
from .base import ParameterSpec
from .registry import CapabilityRegistry
from .semantic import SemanticCapability, template_variables

logger = logging.getLogger(__name__)

PROMPT_FILE = "skprompt.txt"
CONFIG_FILE = "config.json"


class _InputParameter(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    description: str = ""
    default_value: Optional[str] = Field(default=None, alias="defaultValue")


class _InputConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    parameters: List[_InputParameter] = Field(default_factory=list)


class _CompletionConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None


class PromptConfig(BaseModel):
    """Parsed ``config.json`` of a semantic function."""

    model_config = ConfigDict(extra="ignore")

    description: str = ""
    input: _InputConfig = Field(default_factory=_InputConfig)
    completion: _CompletionConfig = Field(default_factory=_CompletionConfig)

    def model_settings(self) -> Optional[ModelSettings]:
        values = self.completion.model_dump(exclude_none=True)
        return ModelSettings(**values) if values else None


def _read_config(function_dir: Path) -> PromptConfig:
    path = function_dir / CONFIG_FILE
    if not path.is_file():
        return PromptConfig()
    try:
        return PromptConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise SkillLoadError(str(path), f"invalid config: {e.error_count()} error(s)") from e


def load_semantic_function(plugin_name: str, function_dir: Path) -> SemanticCapability:
    """Load a single semantic function directory."""
    template = (function_dir / PROMPT_FILE).read_text(encoding="utf-8")
    config = _read_config(function_dir)

    params: List[ParameterSpec] = [
        ParameterSpec(
            name=p.name,
            description=p.description,
            default=p.default_value,
            required=False,
        )
        for p in config.input.parameters
    ]
    declared = {p.name for p in params}
    for var in template_variables(template):
        if var not in declared:
            params.append(ParameterSpec(name=var, required=False))
            declared.add(var)

    return SemanticCapability(
        name=f"{plugin_name}.{function_dir.name}",
        description=config.description,
        template=template,
        parameters=tuple(params),
        completion_settings=config.model_settings(),
    )


def load_semantic_skills(
    registry: CapabilityRegistry,
    root: str | Path,
    plugins: Sequence[str] = (),
) -> Dict[str, SemanticCapability]:
    """Import semantic functions from ``root`` into ``registry``.

    Args:
        registry: The registry that receives the capabilities.
        root: Skills root directory.
        plugins: Plugin directory names to import. An empty sequence imports
            every sub-directory of ``root``.

    Returns:
        The imported capabilities keyed by function name.

    Raises:
        SkillLoadError: If ``root`` or a requested plugin directory is missing.
        DuplicateNameError: If a function name collides with an existing capability.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise SkillLoadError(str(root_path), "skills root is not a directory")

    plugin_names = list(plugins) or sorted(p.name for p in root_path.iterdir() if p.is_dir())
    imported: Dict[str, SemanticCapability] = {}
    for plugin_name in plugin_names:
        plugin_dir = root_path / plugin_name
        if not plugin_dir.is_dir():
            raise SkillLoadError(str(plugin_dir), "plugin directory not found")
        for function_dir in sorted(p for p in plugin_dir.iterdir() if p.is_dir()):
            if not (function_dir / PROMPT_FILE).is_file():
                logger.warning(f"Skipping '{function_dir}': no {PROMPT_FILE}")
                continue
            cap = load_semantic_function(plugin_name, function_dir)
            registry.register(cap)
            imported[function_dir.name] = cap
        logger.info(f"Imported semantic plugin '{plugin_name}' from {plugin_dir}")
    return imported
