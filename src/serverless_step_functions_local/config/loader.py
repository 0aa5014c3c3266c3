"""
Service Config Loader

Adds the step function configuration of a service file to the in-memory
service. The file is parsed according to its extension (YAML, JSON or a
Python module), variables are resolved, the ``stepFunctions`` block is
normalized, and stage/region defaults are applied before a second
resolution pass over the service.
"""

import json
import logging
import runpy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_FILENAME = "serverless.yml"
DEFAULT_STAGE = "dev"
DEFAULT_REGION = "us-east-1"


def read_service_file(file_path: Path) -> Dict[str, Any]:
    """
    Parse a service file into a dictionary.

    ``.json`` files are parsed as JSON, ``.py`` files are executed and must
    define a module level ``service`` (a dict, or a zero-argument callable
    returning one); anything else is parsed as YAML.

    Raises:
        ConfigurationError: If the file is missing, malformed or not a mapping
    """
    file_path = Path(file_path)
    suffix = file_path.suffix.lower()
    try:
        if suffix == ".json":
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        elif suffix == ".py":
            data = runpy.run_path(str(file_path)).get("service")
            if callable(data):
                data = data()
        else:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Service file not found: {file_path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON format in {file_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML format in {file_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Service file {file_path} must contain a mapping, got {type(data).__name__}")
    return data


class ServiceConfigLoader:
    """
    Loads ``stepFunctions`` configuration into a host service.

    Attributes:
        serverless: Host framework object (service, config, plugin_manager, variables)
        options (Dict[str, Any]): Options the plugin was created with
    """

    def __init__(self, serverless, options: Optional[Dict[str, Any]] = None):
        self.serverless = serverless
        self.options = options or {}

    def service_file_path(self) -> Path:
        service_path = self.serverless.config.service_path
        if not service_path:
            raise ConfigurationError("service path not found")
        file_name = (
            self.options.get("config")
            or getattr(self.serverless.service, "service_filename", None)
            or DEFAULT_SERVICE_FILENAME
        )
        return Path(service_path) / file_name

    def load(self) -> Dict[str, Any]:
        """
        Parse the service file and populate ``service.step_functions``.

        Returns:
            Dict[str, Any]: The normalized ``{validate, stateMachines, activities}`` block

        Raises:
            ConfigurationError: If the service path is missing or the file is invalid
        """
        file_path = self.service_file_path()
        logger.info("Loading step functions from %s", file_path)

        variables = self.serverless.variables
        parsed = variables.populate_object(read_service_file(file_path))

        self.serverless.service.step_functions = self.normalize_step_functions(parsed.get("stepFunctions"))
        self.apply_stage_and_region_defaults()

        variables.populate_service(self.serverless.service, self.serverless.plugin_manager.cli_options)
        return self.serverless.service.step_functions

    @staticmethod
    def normalize_step_functions(step_functions: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        if step_functions is None:
            step_functions = {}
        if not isinstance(step_functions, dict):
            raise ConfigurationError(f"stepFunctions must be a mapping, got {type(step_functions).__name__}")
        return {
            "validate": step_functions.get("validate") or False,
            "stateMachines": step_functions.get("stateMachines") or {},
            "activities": step_functions.get("activities") or [],
        }

    def apply_stage_and_region_defaults(self) -> None:
        """
        Default ``stage``/``region`` CLI options: plugin option, then provider
        setting, then ``dev`` / ``us-east-1``. Options already set are kept.
        """
        cli_options = self.serverless.plugin_manager.cli_options
        provider = getattr(self.serverless.service, "provider", None) or {}

        if not cli_options.get("stage"):
            cli_options["stage"] = self.options.get("stage") or provider.get("stage") or DEFAULT_STAGE

        if not cli_options.get("region"):
            cli_options["region"] = self.options.get("region") or provider.get("region") or DEFAULT_REGION
