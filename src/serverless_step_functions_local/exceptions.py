"""
Exception hierarchy for Serverless Step Functions Local.

Every error raised by the plugin derives from StepFunctionsLocalError so the
host (or the CLI entry point) can report startup failures uniformly.
"""


class StepFunctionsLocalError(Exception):
    """Base class for all plugin errors."""


class ConfigurationError(StepFunctionsLocalError, ValueError):
    """Raised when plugin settings or the service file are missing or invalid."""


class EmulatorInstallError(StepFunctionsLocalError):
    """Raised when the Step Functions Local distribution cannot be installed."""


class EmulatorStartError(StepFunctionsLocalError):
    """Raised when the emulator process cannot be launched or never becomes ready."""


class PortWaitTimeoutError(StepFunctionsLocalError, TimeoutError):
    """Raised when a TCP port is not accepting connections before the deadline."""

    def __init__(self, host: str, port: int, timeout: float):
        super().__init__(f"Port {host}:{port} not in use after {timeout} seconds")
        self.host = host
        self.port = port
        self.timeout = timeout


class RegistrationError(StepFunctionsLocalError):
    """Raised when a state machine could not be created on the emulator."""

    def __init__(self, state_machine_name: str, reason: str):
        super().__init__(f"Failed to create state machine '{state_machine_name}': {reason}")
        self.state_machine_name = state_machine_name
        self.reason = reason
