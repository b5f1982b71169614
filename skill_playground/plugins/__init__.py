"""Native plugins shipped with skill_playground.

Each plugin is a plain class whose ``@native_function`` methods become
capabilities named ``<PluginClass>.<method>`` when imported with
``CapabilityRegistry.import_plugin``.
"""

from .http import HttpPlugin
from .keygen import KeyAndCertGenerator
from .secrets import SecretYamlUpdater

__all__ = [
    "HttpPlugin",
    "KeyAndCertGenerator",
    "SecretYamlUpdater",
]
