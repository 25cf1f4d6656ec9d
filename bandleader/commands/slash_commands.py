"""Translation between registered commands and Discord application commands."""
import re
from typing import Any, Dict, Iterable, Mapping

import discord

from bandleader.commands.arguments import serialize_option
from bandleader.commands.command_enums import ArgumentType
from bandleader.commands.registry import ArgumentDefinition, Command, RegistrationError

# Slash command names and descriptions are limited by Discord
MAX_NAME_LENGTH = 32
MAX_DESCRIPTION_LENGTH = 100
COMMAND_NAME = re.compile(r"^[-_a-z0-9]{1,32}$")

OPTION_TYPES: Dict[ArgumentType, discord.AppCommandOptionType] = {
    ArgumentType.STRING: discord.AppCommandOptionType.string,
    ArgumentType.NUMBER: discord.AppCommandOptionType.number,
    ArgumentType.BOOLEAN: discord.AppCommandOptionType.boolean,
    # Durations are typed as text, e.g. "10m"
    ArgumentType.DURATION: discord.AppCommandOptionType.string,
    ArgumentType.USER: discord.AppCommandOptionType.user,
    ArgumentType.ROLE: discord.AppCommandOptionType.role,
    ArgumentType.CHANNEL: discord.AppCommandOptionType.channel,
}


def validate_slash_command(command: Command) -> None:
    """Reject commands Discord would not accept as application commands.

    Names are sent unchanged, so the remote command list can be compared by name.
    """
    if not COMMAND_NAME.match(command.name):
        raise RegistrationError(
            f"Command {command.name} cannot be a slash command: names are 1-32 lower case letters, "
            f"digits, dashes or underscores")


def option_name(argument: ArgumentDefinition) -> str:
    """Slash option names must be lower case."""
    return argument.name.lower()[:MAX_NAME_LENGTH]


def _description(text: str, fallback: str) -> str:
    return (text or fallback)[:MAX_DESCRIPTION_LENGTH]


def build_option(argument: ArgumentDefinition) -> Dict[str, Any]:
    option: Dict[str, Any] = {
        "name": option_name(argument),
        "description": _description(argument.description, argument.name),
        "type": OPTION_TYPES[argument.type].value,
        "required": not argument.optional,
    }
    if argument.one_of:
        option["choices"] = [{"name": str(choice), "value": choice} for choice in argument.one_of]
    return option


def build_payload(command: Command) -> Dict[str, Any]:
    """The application command payload registering a command as a chat input command."""
    payload: Dict[str, Any] = {
        "name": command.name,
        "description": _description(command.description, command.name),
        "type": discord.AppCommandType.chat_input.value,
    }
    if command.arguments:
        payload["options"] = [build_option(argument) for argument in command.arguments]
    return payload


def options_to_tokens(command: Command, options: Iterable[Mapping[str, Any]]) -> list[str]:
    """Rebuild the raw words of a text invocation from the typed options of a slash invocation.

    Options are matched to arguments by name, in declaration order. The first
    argument without a supplied option ends the words, like running out of
    words in a text message.
    """
    values = {option["name"]: option.get("value") for option in options}
    tokens = []
    for argument in command.arguments:
        name = option_name(argument)
        if name not in values:
            break
        tokens.append(serialize_option(argument, values[name]))
    return tokens
