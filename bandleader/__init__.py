"""
A thin wrapper over discord.py for bots made of command modules.

Commands live in one folder per group and export a ``command`` object;
event modules export an ``event`` object. The wrapper discovers them,
checks permissions, parses arguments and runs them for text messages or
slash interactions.
"""

from .bot_impl import BotWrapper, PermissionDenied
from .commands import (
    ArgumentDefinition, ArgumentError, ArgumentType, Command, EventKind, SlashResponse, ValidationError
)
from .model import (
    BOT_OWNER, GUILD_OWNER, BotEvent, CommandData, EventData, FlagSet, WrapperSettings, flags
)
from .time_utils import Duration, DurationPeriod

__all__ = [
    'ArgumentDefinition',
    'ArgumentError',
    'ArgumentType',
    'BOT_OWNER',
    'BotEvent',
    'BotWrapper',
    'Command',
    'CommandData',
    'Duration',
    'DurationPeriod',
    'EventData',
    'EventKind',
    'FlagSet',
    'GUILD_OWNER',
    'PermissionDenied',
    'SlashResponse',
    'ValidationError',
    'WrapperSettings',
    'flags',
]
