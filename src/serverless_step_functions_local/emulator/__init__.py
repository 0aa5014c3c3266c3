"""
Emulator Package

Lifecycle management of the Step Functions Local process:
- StepFunctionsLocal: install, start (with port readiness wait) and stop
- wait_until_used: bounded TCP readiness poll
"""

from .port_wait import is_port_in_use, wait_until_used
from .step_functions_local import ADMIN_PORT, StepFunctionsLocal

__all__ = ["StepFunctionsLocal", "ADMIN_PORT", "is_port_in_use", "wait_until_used"]
