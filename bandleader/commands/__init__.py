"""
Command system of the wrapper.

This module provides the command registry, argument parsing, module
discovery and the built-in commands.
"""

from . import help_commands, reload_commands
from .arguments import ArgumentError, parse_arguments
from .command_enums import ArgumentType, EventKind, SlashResponse
from .help_commands import HelpGenerator
from .registry import (
    ArgumentDefinition, Command, CommandRegistry, RegistrationError, ValidationError, BUILTIN_GROUP
)

# Builtins are registered in this order before any discovered command
BUILTIN_COMMANDS = (reload_commands.command, help_commands.command)

__all__ = [
    'ArgumentDefinition',
    'ArgumentError',
    'ArgumentType',
    'BUILTIN_COMMANDS',
    'BUILTIN_GROUP',
    'Command',
    'CommandRegistry',
    'EventKind',
    'HelpGenerator',
    'RegistrationError',
    'SlashResponse',
    'ValidationError',
    'parse_arguments',
]
