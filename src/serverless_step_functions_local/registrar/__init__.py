"""
Registrar Package

Registers state machine definitions with the local emulator and publishes
their ARNs.
"""

from .definition_registrar import DefinitionRegistrar, environment_variable_name

__all__ = ["DefinitionRegistrar", "environment_variable_name"]
