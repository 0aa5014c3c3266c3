"""
Plugin Settings

Reads the ``custom.stepFunctionsLocal`` block of a service and applies the
plugin defaults. Missing required settings are fatal: the plugin refuses to
initialize without an account and a region.
"""

from typing import Any, Dict, Optional

from ..exceptions import ConfigurationError

DEFAULT_LAMBDA_ENDPOINT = "http://localhost:4000"
DEFAULT_INSTALL_PATH = "./.step-functions-local"

# Optional emulator settings forwarded untouched to the Step Functions Local process
EMULATOR_PASSTHROUGH_OPTIONS = (
    "batchEndpoint",
    "dynamoDBEndpoint",
    "ecsEndpoint",
    "glueEndpoint",
    "sageMakerEndpoint",
    "snsEndpoint",
    "sqsEndpoint",
    "stepFunctionsEndpoint",
    "waitTimeScale",
)


class StepFunctionsLocalSettings:
    """
    Validated ``custom.stepFunctionsLocal`` settings.

    Attributes:
        account_id (str): AWS account id the emulator pretends to run in
        region (str): AWS region used by the emulator and the admin client
        lambda_endpoint (str): Endpoint Task states invoke Lambda functions on
        path (str): Install directory of the emulator distribution
        task_resource_mapping (Dict[str, Any]): Parent key -> replacement Resource
        extra (Dict[str, Any]): Optional emulator options (see EMULATOR_PASSTHROUGH_OPTIONS)
    """

    def __init__(
        self,
        account_id: Any,
        region: str,
        lambda_endpoint: Optional[str] = None,
        path: Optional[str] = None,
        task_resource_mapping: Optional[Dict[str, Any]] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        if not account_id:
            raise ConfigurationError("Step Functions Local: missing accountId")
        if not region:
            raise ConfigurationError("Step Functions Local: missing region")
        if task_resource_mapping is not None and not isinstance(task_resource_mapping, dict):
            raise ConfigurationError("Step Functions Local: TaskResourceMapping must be a mapping")

        self.account_id = str(account_id)
        self.region = region
        self.lambda_endpoint = lambda_endpoint or DEFAULT_LAMBDA_ENDPOINT
        self.path = path or DEFAULT_INSTALL_PATH
        self.task_resource_mapping = task_resource_mapping
        self.extra = dict(extra or {})

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]]) -> "StepFunctionsLocalSettings":
        """Build settings from a raw ``stepFunctionsLocal`` dictionary."""
        config = config or {}
        return cls(
            account_id=config.get("accountId"),
            region=config.get("region"),
            lambda_endpoint=config.get("lambdaEndpoint"),
            path=config.get("path"),
            task_resource_mapping=config.get("TaskResourceMapping"),
            extra={k: config[k] for k in EMULATOR_PASSTHROUGH_OPTIONS if config.get(k) is not None},
        )

    @classmethod
    def from_service(cls, service) -> "StepFunctionsLocalSettings":
        """Build settings from a service's ``custom.stepFunctionsLocal`` block."""
        custom = getattr(service, "custom", None) or {}
        return cls.from_dict(custom.get("stepFunctionsLocal"))

