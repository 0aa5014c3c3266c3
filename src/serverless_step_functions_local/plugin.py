"""
Serverless Step Functions Local Plugin

Wires the emulator lifecycle, the config loader, the task resource mapping
and the definition registrar into the host's offline lifecycle:

1. ``offline:start:init``: install -> start -> load config -> rewrite -> register
2. ``before:offline:start:end``: stop the emulator
"""

import logging
from typing import Any, Dict, Optional

from .config.loader import ServiceConfigLoader
from .config.settings import StepFunctionsLocalSettings
from .emulator.step_functions_local import ADMIN_PORT, StepFunctionsLocal
from .registrar.definition_registrar import DefinitionRegistrar
from .transform.resource_mapping import replace_state_machine_resources

logger = logging.getLogger(__name__)


class ServerlessStepFunctionsLocal:
    """
    Plugin running state machines against Step Functions Local during offline sessions.

    Attributes:
        settings (StepFunctionsLocalSettings): Validated ``custom.stepFunctionsLocal`` settings
        stepfunctions_server (StepFunctionsLocal): Emulator process manager
        stepfunctions_api (DefinitionRegistrar): Admin API client bound to the emulator
        state_machines (Dict[str, Any]): State machines loaded from the service file
        endpoints (Dict[str, str]): Environment variable name -> registered state machine ARN
        hooks (Dict[str, Callable]): Lifecycle event -> handler
    """

    def __init__(self, serverless, options: Optional[Dict[str, Any]] = None):
        self.serverless = serverless
        self.service = serverless.service
        self.options = options or {}
        self.log = serverless.cli.log

        # Check config
        self.settings = StepFunctionsLocalSettings.from_service(self.service)

        self.stepfunctions_server = StepFunctionsLocal(self.settings.path, port=ADMIN_PORT)
        self.stepfunctions_api = DefinitionRegistrar(
            self.settings.account_id,
            self.settings.region,
            endpoint=f"http://localhost:{ADMIN_PORT}",
        )

        self.state_machines: Dict[str, Any] = {}
        self.endpoints: Dict[str, str] = {}

        self.hooks = {
            "offline:start:init": self.on_offline_start,
            "before:offline:start:end": self.on_offline_end,
        }

    def on_offline_start(self) -> Dict[str, str]:
        """Bring the emulator up and register every configured state machine."""
        self.install_step_functions()
        self.start_step_functions()
        self.get_step_functions_from_config()
        return self.create_endpoints()

    def on_offline_end(self) -> None:
        self.stop_step_functions()

    def install_step_functions(self):
        return self.stepfunctions_server.install()

    def start_step_functions(self):
        self.log("Starting Step Functions Local")
        return self.stepfunctions_server.start(
            self.settings.account_id,
            self.settings.lambda_endpoint,
            region=self.settings.region,
            **self.settings.extra,
        )

    def stop_step_functions(self) -> None:
        self.log("Stopping Step Functions Local")
        self.stepfunctions_server.stop()

    def get_step_functions_from_config(self) -> Dict[str, Any]:
        """
        Load state machines from the service file and apply the TaskResourceMapping.

        Raises:
            ConfigurationError: If the service path is unknown or the file is invalid
        """
        ServiceConfigLoader(self.serverless, self.options).load()
        self.state_machines = self.service.step_functions["stateMachines"]

        # TaskResourceMapping as resolved by the second pass
        mapping = (self.service.custom.get("stepFunctionsLocal") or {}).get("TaskResourceMapping")
        if mapping:
            replace_state_machine_resources(self.state_machines, mapping)
        return self.state_machines

    def create_endpoints(self) -> Dict[str, str]:
        """Register the loaded state machines and publish their ARNs to the environment."""
        self.endpoints = self.stepfunctions_api.create_endpoints(self.state_machines)
        self.stepfunctions_api.publish_environment(self.endpoints)
        self.log(f"Registered {len(self.endpoints)} state machine(s) with Step Functions Local")
        return self.endpoints
