"""Command registry system for organizing bot commands into groups."""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, Iterator, NamedTuple, Optional, Union

from bandleader.commands.command_enums import ArgumentType, SlashResponse
from bandleader.model.permissions import FlagSet, OwnerRequirement, UserRequirement

logger = logging.getLogger("bandleader")

BUILTIN_GROUP = "builtin"
BUILTIN_GROUP_DESCRIPTION = "Built-in commands"


# =============================================================================
# Type Definitions
# =============================================================================

class ValidationError(Exception):
    """Exception raised when a command cannot be registered or invoked."""
    pass


class RegistrationError(ValidationError):
    """Exception raised when a command definition is rejected by the registry."""
    pass


class ArgumentDefinition(NamedTuple):
    """Definition of a command argument.

    Arguments map positionally to the words following the command name, so
    they must be declared in the order users are expected to type them.

    Args:
        name: Display name, also used as the slash option name (lower-cased)
        description: Display text
        type: The type the raw text is coerced to
        optional: Whether the argument may be omitted (only from the end)
        rest: String arguments only; captures all remaining words as one value.
              Must be the last argument.
        one_of: Closed set of allowed values (string and number arguments only)

    Examples:
        ArgumentDefinition("target", "Who to poke", ArgumentType.USER)
        ArgumentDefinition("mode", "Mode", ArgumentType.STRING, one_of=("add", "remove"))
        ArgumentDefinition("text", "The message", ArgumentType.STRING, optional=True, rest=True)
    """
    name: str
    description: str
    type: ArgumentType = ArgumentType.STRING
    optional: bool = False
    rest: bool = False
    one_of: tuple[Union[str, float], ...] = ()

    def format(self) -> str:
        wrapper = "[{}]" if self.optional else "<{}>"
        if self.one_of:
            return wrapper.format("|".join(str(choice) for choice in self.one_of))
        return wrapper.format(f"{self.name}..." if self.rest else self.name)


class Command(NamedTuple):
    """A named capability users can invoke by text or slash command.

    The handler is awaited as ``handler(wrapper, data, *arguments)`` where
    ``data`` is the invocation's ``CommandData`` and ``arguments`` holds one
    typed value per supplied argument.
    """
    name: str
    description: str
    handler: Callable[..., Awaitable[Any]]
    arguments: tuple[ArgumentDefinition, ...] = ()
    bot_permissions: Optional[FlagSet] = None
    user_permissions: Optional[UserRequirement] = None
    slash_response: SlashResponse = SlashResponse.DEFER
    # Assigned by the registry on load
    group: Optional[str] = None

    def usage(self) -> str:
        """The command name followed by its arguments, e.g. ``remind <duration> [text...]``."""
        if not self.arguments:
            return self.name
        return f"{self.name} {' '.join(arg.format() for arg in self.arguments)}"


# =============================================================================
# Validation Functions
# =============================================================================

def validate_command(command: Command) -> None:
    """Validate the argument and permission declarations of a command.

    Raises:
        RegistrationError: If the command can never be parsed correctly
    """
    if not command.name:
        raise RegistrationError("Command without a name")

    rest_arguments = [arg for arg in command.arguments if arg.rest]
    if len(rest_arguments) > 1:
        raise RegistrationError(f"Command {command.name} registers more than one rest argument")
    if rest_arguments and rest_arguments[0] is not command.arguments[-1]:
        raise RegistrationError(f"Command {command.name} registers a non-last rest argument")

    for arg in command.arguments:
        if arg.rest and arg.type is not ArgumentType.STRING:
            raise RegistrationError(f"Command {command.name} registers a rest argument that is not a string")
        if arg.one_of and arg.type not in (ArgumentType.STRING, ArgumentType.NUMBER):
            raise RegistrationError(
                f"Command {command.name} restricts the {arg.type.value} argument {arg.name} to fixed options")

    if command.bot_permissions is not None and not isinstance(command.bot_permissions, FlagSet):
        raise RegistrationError(f"Command {command.name} requires bot permissions that are not a FlagSet")
    if (command.user_permissions is not None
            and not isinstance(command.user_permissions, (OwnerRequirement, FlagSet))):
        raise RegistrationError(
            f"Command {command.name} has an unknown user permission requirement {command.user_permissions!r}")


class CommandRegistry:
    """Registry of commands grouped by category.

    The command map is only ever replaced as a whole, so a dispatch that
    looked up a command before a reload keeps using the old definition.
    """

    def __init__(self, builtins: Iterable[Command] = (), validators: Iterable[Callable[[Command], None]] = ()):
        self._builtins: tuple[Command, ...] = tuple(builtins)
        # Extra checks run on every non-builtin command, raising RegistrationError
        self.validators: list[Callable[[Command], None]] = list(validators)
        self.groups: Dict[str, str] = {BUILTIN_GROUP: BUILTIN_GROUP_DESCRIPTION}
        self.commands: Dict[str, Command] = self._builtin_commands()

    # =========================================================================
    # Groups
    # =========================================================================

    def register_groups(self, groups: Iterable[tuple[str, str]]) -> None:
        """Register command groups as (name, description) pairs.

        Groups without a name or description, or using the reserved builtin
        name, are logged and skipped.
        """
        for group in groups:
            name, description = (tuple(group) + ("", ""))[:2]
            if not name or not description or name == BUILTIN_GROUP:
                logger.error(
                    f"Skipping group {name!r} without name or description, or using a reserved group name.")
                continue
            self.groups[name] = description

    def group_description(self, name: Optional[str]) -> Optional[str]:
        return self.groups.get(name) if name else None

    def sorted_groups(self) -> list[str]:
        """Group names in alphabetical order, with the builtin group last."""
        named = sorted((group for group in self.groups if group != BUILTIN_GROUP), key=str.lower)
        return named + [BUILTIN_GROUP]

    # =========================================================================
    # Commands
    # =========================================================================

    def load(self, discover: Callable[[str], Iterable[Command]]) -> None:
        """Rebuild the command set from scratch.

        Builtins are inserted first, then every command yielded by
        ``discover(group)`` for each registered group. Rejected commands are
        logged and skipped. The new set replaces the old one at once.
        """
        commands = self._builtin_commands()
        for group in self.groups:
            if group == BUILTIN_GROUP:
                continue
            for command in discover(group):
                try:
                    self._add(commands, command, group)
                except RegistrationError as e:
                    logger.error(f"{e} - skipping")
        self.commands = commands

    def register(self, command: Command, group: str) -> Command:
        """Register a single command into a registered group.

        Raises:
            RegistrationError: If the group is unknown, the name is taken or the
                argument declarations are invalid
        """
        if group not in self.groups or group == BUILTIN_GROUP:
            raise RegistrationError(f"Cannot register command {command.name} into group {group!r}")
        commands = dict(self.commands)
        registered = self._add(commands, command, group)
        self.commands = commands
        return registered

    def get(self, name: str) -> Optional[Command]:
        return self.commands.get(name)

    def commands_in_group(self, group: str) -> tuple[Command, ...]:
        return tuple(sorted(
            (command for command in self.commands.values() if command.group == group),
            key=lambda command: command.name))

    def __contains__(self, name: object) -> bool:
        return name in self.commands

    def __iter__(self) -> Iterator[Command]:
        return iter(self.commands.values())

    def __len__(self) -> int:
        return len(self.commands)

    def log_registered_commands(self, log: logging.Logger) -> None:
        """Log all registered commands, per group."""
        log.info(f"Command Registry: {len(self.commands)} commands in {len(self.groups)} groups")
        for group in self.sorted_groups():
            names = [command.name for command in self.commands_in_group(group)]
            log.info(f"{group}: {', '.join(names) if names else '(none)'}")

    # =========================================================================
    # Internals
    # =========================================================================

    def _builtin_commands(self) -> Dict[str, Command]:
        # Builtins are not checked for duplicates; they always win
        return {command.name: command._replace(group=BUILTIN_GROUP) for command in self._builtins}

    def _add(self, commands: Dict[str, Command], command: Command, group: str) -> Command:
        if not isinstance(command, Command):
            raise RegistrationError(f"{command!r} is not a Command")
        if command.name in commands:
            raise RegistrationError(f"Command {command.name} is being registered twice")
        validate_command(command)
        for validator in self.validators:
            validator(command)
        registered = command._replace(arguments=tuple(command.arguments), group=group)
        commands[command.name] = registered
        return registered
