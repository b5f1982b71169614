"""Ambient configuration shared by every skill_playground module.

- ``config``: pydantic-settings ``Settings`` bound to ``SKILL_PLAYGROUND_*``
  environment variables and ``.env``.
- ``logging_config``: console/file logging setup used by the CLI.
"""

from .config import CompletionConfig, Settings, load_settings
from .logging_config import get_logger, setup_logging

__all__ = [
    "CompletionConfig",
    "Settings",
    "get_logger",
    "load_settings",
    "setup_logging",
]
