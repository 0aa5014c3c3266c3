"""
Transform Package

Rewrites state machine definitions before they are registered with the
local emulator.
"""

from .resource_mapping import replace_state_machine_resources, replace_task_resource_mappings

__all__ = ["replace_task_resource_mappings", "replace_state_machine_resources"]
