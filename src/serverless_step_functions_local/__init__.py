"""
Serverless Step Functions Local

Runs the state machines of a Serverless service against a local AWS Step
Functions emulator during offline development sessions.

Main Components:
- config: Plugin settings, variable resolution and service file loading.
- transform: TaskResourceMapping rewriting of state machine definitions.
- emulator: Install, start and stop of the Step Functions Local process.
- registrar: Registration of state machines and ARN publication.
- plugin: The plugin wiring everything into the offline lifecycle hooks.

Usage:
    from serverless_step_functions_local import Serverless, ServerlessStepFunctionsLocal

    serverless = Serverless.from_service_path("path/to/service")
    plugin = serverless.plugin_manager.register(ServerlessStepFunctionsLocal(serverless))
    serverless.plugin_manager.run_hook("offline:start:init")
"""

# Version information
__version__ = "1.0.0"
__author__ = "Serverless Step Functions Local Team"
__description__ = "Step Functions Local integration for offline Serverless development"

from .config import ServiceConfigLoader, StepFunctionsLocalSettings, VariableResolver
from .emulator import StepFunctionsLocal, wait_until_used
from .exceptions import (
    ConfigurationError,
    EmulatorInstallError,
    EmulatorStartError,
    PortWaitTimeoutError,
    RegistrationError,
    StepFunctionsLocalError,
)
from .framework import Serverless, Service
from .plugin import ServerlessStepFunctionsLocal
from .registrar import DefinitionRegistrar, environment_variable_name
from .session import OfflineSession
from .transform import replace_task_resource_mappings

__all__ = [
    # Package metadata
    "__version__",
    "__author__",
    "__description__",
    # Plugin and host
    "ServerlessStepFunctionsLocal",
    "Serverless",
    "Service",
    "OfflineSession",
    # Config
    "ServiceConfigLoader",
    "StepFunctionsLocalSettings",
    "VariableResolver",
    # Emulator
    "StepFunctionsLocal",
    "wait_until_used",
    # Registrar
    "DefinitionRegistrar",
    "environment_variable_name",
    # Transform
    "replace_task_resource_mappings",
    # Errors
    "StepFunctionsLocalError",
    "ConfigurationError",
    "EmulatorInstallError",
    "EmulatorStartError",
    "PortWaitTimeoutError",
    "RegistrationError",
]

# Package-level configuration
import logging

# Set up package-level logging
logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())  # Prevent "No handlers" warnings


def get_package_info():
    """Get information about the package and available components."""
    info = {
        "version": __version__,
        "author": __author__,
        "description": __description__,
        "public_api": __all__,
    }
    return info
