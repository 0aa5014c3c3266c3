"""
Host Framework

A minimal stand-in for the Serverless Framework objects a plugin talks to:
the service (``custom``, ``provider``, ``stepFunctions``), the framework
config (service path), a CLI logger, the plugin manager with its CLI options
and lifecycle hooks, and the variable resolver.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from colorama import Fore, Style

from .config.loader import DEFAULT_SERVICE_FILENAME, read_service_file
from .config.variables import VariableResolver

logger = logging.getLogger(__name__)


class Service:
    """In-memory service definition."""

    def __init__(
        self,
        name: str = "",
        custom: Optional[Dict[str, Any]] = None,
        provider: Optional[Dict[str, Any]] = None,
        service_filename: str = DEFAULT_SERVICE_FILENAME,
    ):
        self.name = name
        self.custom = custom or {}
        self.provider = provider or {}
        self.step_functions: Dict[str, Any] = {}
        self.service_filename = service_filename

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service": self.name,
            "custom": self.custom,
            "provider": self.provider,
            "stepFunctions": self.step_functions,
        }


class ServerlessConfig:
    def __init__(self, service_path: Optional[str] = None):
        self.service_path = service_path


class CLI:
    """Framework console: status lines go to stdout and to the package logger."""

    def __init__(self, prefix: str = "Serverless"):
        self.prefix = prefix

    def log(self, message: str) -> None:
        logger.info(message)
        print(f"{Fore.CYAN}{self.prefix}: {Style.RESET_ALL}{message}")


class PluginManager:
    """
    Holds plugin instances, CLI options and the hooks plugins subscribe to.

    Hooks of the same name run in plugin registration order.
    """

    def __init__(self, cli_options: Optional[Dict[str, Any]] = None):
        self.cli_options: Dict[str, Any] = dict(cli_options or {})
        self.plugins: List[Any] = []

    def register(self, plugin) -> Any:
        self.plugins.append(plugin)
        return plugin

    def get_hooks(self, event: str) -> List[Callable[[], Any]]:
        return [plugin.hooks[event] for plugin in self.plugins if event in getattr(plugin, "hooks", {})]

    def run_hook(self, event: str) -> None:
        """Run every hook registered for ``event``; errors propagate to the caller."""
        hooks = self.get_hooks(event)
        logger.debug("Running %d hook(s) for %s", len(hooks), event)
        for hook in hooks:
            hook()


class Serverless:
    """
    Host object handed to plugins.

    Attributes:
        service (Service): The service definition
        config (ServerlessConfig): Framework configuration, incl. service path
        cli (CLI): Console logger
        plugin_manager (PluginManager): Plugins, CLI options and hooks
        variables (VariableResolver): Variable resolution over configuration trees
    """

    def __init__(
        self,
        service: Optional[Service] = None,
        service_path: Optional[str] = None,
        cli_options: Optional[Dict[str, Any]] = None,
        environ=None,
    ):
        self.service = service or Service()
        self.config = ServerlessConfig(service_path)
        self.cli = CLI()
        self.plugin_manager = PluginManager(cli_options)
        self.variables = VariableResolver(self.plugin_manager.cli_options, environ)

    @classmethod
    def from_service_path(
        cls,
        service_path: str,
        options: Optional[Dict[str, Any]] = None,
        environ=None,
    ) -> "Serverless":
        """
        Build a host from a service directory.

        The ``service``, ``custom`` and ``provider`` blocks of the service file
        are resolved against ``options`` and loaded into the service.
        """
        options = dict(options or {})
        file_name = options.get("config") or DEFAULT_SERVICE_FILENAME
        serverless = cls(service_path=service_path, cli_options=options, environ=environ)

        data = serverless.variables.populate_object(read_service_file(Path(service_path) / file_name))
        name = data.get("service") or ""
        if isinstance(name, dict):
            name = name.get("name") or ""
        serverless.service = Service(
            name=name,
            custom=data.get("custom"),
            provider=data.get("provider"),
            service_filename=file_name,
        )
        return serverless
