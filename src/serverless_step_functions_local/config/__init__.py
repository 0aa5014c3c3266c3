"""
Config Package

Configuration handling for the plugin:
- StepFunctionsLocalSettings: validated ``custom.stepFunctionsLocal`` settings
- VariableResolver: ``${self:...}`` / ``${opt:...}`` / ``${env:...}`` resolution
- ServiceConfigLoader: loads the ``stepFunctions`` block of the service file
"""

from .loader import ServiceConfigLoader, read_service_file
from .settings import StepFunctionsLocalSettings
from .variables import VariableResolver, lookup_path, resolve_variables

__all__ = [
    "ServiceConfigLoader",
    "read_service_file",
    "StepFunctionsLocalSettings",
    "VariableResolver",
    "lookup_path",
    "resolve_variables",
]
