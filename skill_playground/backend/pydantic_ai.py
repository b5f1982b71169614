"""Pydantic AI completion backend.

Wraps a Pydantic AI ``Agent`` with ``output_type=str`` so the rest of the
system only sees ``complete(prompt) -> text``. The model itself is built from
``Settings`` by ``build_completion_model``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic_ai import Agent
from pydantic_ai.settings import ModelSettings

from ..core.config import CompletionConfig
from ..errors import BackendError

logger = logging.getLogger(__name__)

SUPPORTED_SERVICE_TYPES = ("openai", "azure-openai", "test")


class PydanticAICompletionBackend:
    """Completion backend backed by a Pydantic AI model."""

    def __init__(self, model: Any, *, system_prompt: str = "") -> None:
        """
        Initialize the backend.

        Args:
            model: A Pydantic AI model instance or model string (e.g. ``"openai:gpt-4o"``).
            system_prompt: Optional system prompt applied to every completion.
        """
        self._model = model
        self._agent: Agent = Agent(model, output_type=str, system_prompt=system_prompt or ())

    @property
    def model(self) -> Any:
        return self._model

    async def complete(self, prompt: str, *, settings: Optional[ModelSettings] = None) -> str:
        logger.debug(f"Requesting completion: prompt_chars={len(prompt)}")
        try:
            result = await self._agent.run(prompt, model_settings=settings)
        except Exception as e:
            raise BackendError(f"completion failed: {type(e).__name__}: {e}") from e
        output = result.output
        if not isinstance(output, str):
            output = str(output)
        logger.debug(f"Completion received: output_chars={len(output)}")
        return output


def build_completion_model(config: CompletionConfig) -> Any:
    """Build a Pydantic AI model for the configured completion service.

    Args:
        config: Completion backend configuration.

    Returns:
        A Pydantic AI model instance.

    Raises:
        ValueError: If the service type is unknown or required settings are missing.
        BackendError: If the OpenAI client cannot be created (e.g. no API key).
    """
    service_type = config.service_type.strip().lower()
    if service_type not in SUPPORTED_SERVICE_TYPES:
        raise ValueError(f"unsupported completion service type: {config.service_type!r}")

    if service_type == "test":
        from pydantic_ai.models.test import TestModel

        logger.debug("Creating offline test completion model")
        return TestModel()

    from openai import OpenAIError
    from pydantic_ai.models.openai import OpenAIChatModel
    from pydantic_ai.providers.openai import OpenAIProvider

    if service_type == "azure-openai":
        from openai import AsyncAzureOpenAI

        if not config.endpoint:
            raise ValueError("azure-openai requires SKILL_PLAYGROUND_ENDPOINT")
        try:
            client = AsyncAzureOpenAI(
                azure_endpoint=config.endpoint,
                api_version=config.api_version,
                api_key=config.api_key,
            )
        except OpenAIError as e:
            raise BackendError(f"cannot create Azure OpenAI client: {e}") from e
        logger.debug(f"Creating Azure OpenAI model: deployment={config.model_id}")
        return OpenAIChatModel(config.model_id, provider=OpenAIProvider(openai_client=client))

    from openai import AsyncOpenAI

    try:
        client = AsyncOpenAI(base_url=config.endpoint, api_key=config.api_key, organization=config.org_id)
    except OpenAIError as e:
        raise BackendError(f"cannot create OpenAI client: {e}") from e
    logger.debug(f"Creating OpenAI model: {config.model_id}")
    return OpenAIChatModel(config.model_id, provider=OpenAIProvider(openai_client=client))
