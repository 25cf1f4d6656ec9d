"""Coercion of raw command words into typed argument values."""
from __future__ import annotations

import math
import re
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, Union

import discord

from bandleader.commands.command_enums import ArgumentType
from bandleader.commands.registry import ArgumentDefinition, Command, ValidationError
from bandleader.time_utils import Duration

USER_MENTION = re.compile(r"^<@!?(\d+)>$")
ROLE_MENTION = re.compile(r"^<@&(\d+)>$")
CHANNEL_MENTION = re.compile(r"^<#(\d+)>$")

TRUTHY = frozenset({"true", "yes", "y", "1"})
FALSY = frozenset({"false", "no", "n", "0"})


class ArgumentError(ValidationError):
    """Exception raised when raw words do not match a command's arguments."""
    pass


Converter = Callable[[discord.Client, ArgumentDefinition, str, Optional[discord.Guild]], Awaitable[Any]]


# =============================================================================
# Per-type converters
# =============================================================================

async def _convert_string(client, argument: ArgumentDefinition, token: str, guild) -> str:
    if argument.one_of and token not in argument.one_of:
        raise ArgumentError(f"{argument.name} must be one of {', '.join(map(str, argument.one_of))}")
    return token


async def _convert_number(client, argument: ArgumentDefinition, token: str, guild) -> float:
    try:
        value = float(token)
    except ValueError:
        raise ArgumentError(f"{argument.name} must be a number") from None
    if not math.isfinite(value):
        raise ArgumentError(f"{argument.name} must be a number")
    if argument.one_of and value not in argument.one_of:
        raise ArgumentError(f"{argument.name} must be one of {', '.join(map(str, argument.one_of))}")
    return value


async def _convert_boolean(client, argument: ArgumentDefinition, token: str, guild) -> bool:
    if token in TRUTHY:
        return True
    if token in FALSY:
        return False
    raise ArgumentError(f"{argument.name} must be yes or no")


async def _convert_duration(client, argument: ArgumentDefinition, token: str, guild) -> Duration:
    duration = Duration.parse(token)
    if duration is None:
        raise ArgumentError(f"{argument.name} must be a duration like 10m")
    return duration


async def _convert_user(client: discord.Client, argument: ArgumentDefinition, token: str, guild) -> discord.User:
    match = USER_MENTION.match(token)
    if not match:
        raise ArgumentError(f"{argument.name} must mention a user")
    user_id = int(match.group(1))
    user = client.get_user(user_id)
    if user is not None:
        return user
    try:
        return await client.fetch_user(user_id)
    except discord.HTTPException:
        raise ArgumentError(f"{argument.name} mentions an unknown user") from None


async def _convert_role(client, argument: ArgumentDefinition, token: str,
                        guild: Optional[discord.Guild]) -> discord.Role:
    if guild is None:
        raise ArgumentError(f"{argument.name} can only be used in a server")
    match = ROLE_MENTION.match(token)
    role = guild.get_role(int(match.group(1))) if match else None
    if role is None:
        raise ArgumentError(f"{argument.name} must mention a role of this server")
    return role


async def _convert_channel(client, argument: ArgumentDefinition, token: str,
                           guild: Optional[discord.Guild]) -> discord.abc.GuildChannel:
    if guild is None:
        raise ArgumentError(f"{argument.name} can only be used in a server")
    match = CHANNEL_MENTION.match(token)
    channel = guild.get_channel(int(match.group(1))) if match else None
    if channel is None:
        raise ArgumentError(f"{argument.name} must mention a channel of this server")
    return channel


CONVERTERS: Dict[ArgumentType, Converter] = {
    ArgumentType.STRING: _convert_string,
    ArgumentType.NUMBER: _convert_number,
    ArgumentType.BOOLEAN: _convert_boolean,
    ArgumentType.DURATION: _convert_duration,
    ArgumentType.USER: _convert_user,
    ArgumentType.ROLE: _convert_role,
    ArgumentType.CHANNEL: _convert_channel,
}


# =============================================================================
# Parsing
# =============================================================================

async def parse_arguments(
        client: discord.Client,
        command: Union[Command, Sequence[ArgumentDefinition]],
        tokens: Sequence[str],
        guild: Optional[discord.Guild] = None
) -> list:
    """Translate raw words into typed values according to a command's arguments.

    Arguments consume words positionally. Parsing stops when the words run
    out; the arguments left over must all be optional and are simply absent
    from the result. A rest argument consumes every remaining word.

    Args:
        client: Client used to resolve user mentions
        command: The command (or its argument definitions) to parse for
        tokens: The words following the command name
        guild: The guild the command was invoked in, None in DMs

    Returns:
        One typed value per supplied argument, in declaration order

    Raises:
        ArgumentError: If any word does not fit its argument; no partial
            result is ever returned
    """
    schema = command.arguments if isinstance(command, Command) else tuple(command)
    if not schema:
        return []

    tokens = [token for token in tokens if token]
    if not tokens and any(not arg.optional for arg in schema):
        raise ArgumentError("Missing arguments")

    values = []
    for position, argument in enumerate(schema):
        if position >= len(tokens):
            if any(not arg.optional for arg in schema[position:]):
                raise ArgumentError(f"Missing argument {argument.name}")
            break
        if argument.rest:
            values.append(" ".join(tokens[position:]))
            break
        values.append(await CONVERTERS[argument.type](client, argument, tokens[position], guild))
    return values


def serialize_option(argument: ArgumentDefinition, value: Any) -> str:
    """Render a typed slash option value in the textual form the parser expects."""
    if argument.type is ArgumentType.USER:
        return f"<@{value}>"
    if argument.type is ArgumentType.ROLE:
        return f"<@&{value}>"
    if argument.type is ArgumentType.CHANNEL:
        return f"<#{value}>"
    if argument.type is ArgumentType.BOOLEAN:
        return "true" if value else "false"
    return str(value)
