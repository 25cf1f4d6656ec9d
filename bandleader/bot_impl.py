from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

import discord

from bandleader.bot_client import create_client, get_token, logger
from bandleader.commands import BUILTIN_COMMANDS
from bandleader.commands.arguments import ArgumentError, parse_arguments
from bandleader.commands.command_enums import EventKind, SlashResponse
from bandleader.commands.loader import discover_commands, discover_events
from bandleader.commands.registry import Command, CommandRegistry, ValidationError
from bandleader.commands.slash_commands import build_payload, options_to_tokens, validate_slash_command
from bandleader.model.command_data import CommandData
from bandleader.model.events import EventData, EventRegistry
from bandleader.model.permissions import BOT_OWNER, GUILD_OWNER, FlagSet
from bandleader.model.settings import WrapperSettings
from bandleader.utils.message_utils import safe_send

BOT_MISSING_PERMISSIONS = ("The bot is missing permissions to run this command. "
                           "Contact your server administrator to have them changed.\n"
                           "Required permissions: {}")
USER_MISSING_PERMISSIONS = "You lack the permissions required to execute this command."
INCORRECT_ARGUMENTS = ("Incorrect arguments. Make sure you're calling the command correctly.\n"
                       "Use `{}help {}` for more information.")
SLASH_FAILURE = ("Something went wrong processing your slash command. "
                 "Try again later, or contact the bot owner if the problem persists.")


class PermissionDenied(ValidationError):
    """Exception raised when the bot or the invoking user may not run a command."""

    def __init__(self, message: str, kind: EventKind, missing: Sequence[str] = ()):
        super().__init__(message)
        self.kind = kind
        self.missing = tuple(missing)


### Classes
class BotWrapper:
    """Routes messages and slash interactions to registered commands.

    Every dispatch is independent: look the command up, check permissions,
    parse the arguments, then await the handler. Exceptions raised by a
    handler are left to discord.py's error handling.
    """

    def __init__(self, settings: WrapperSettings, client: Optional[discord.Client] = None):
        self.settings = settings
        self.client = client if client is not None else create_client()
        self.registry = CommandRegistry(
            BUILTIN_COMMANDS, validators=(validate_slash_command,) if settings.use_slashes else ())
        self.event_registry = EventRegistry()

    @property
    def groups(self) -> dict[str, str]:
        return self.registry.groups

    @property
    def commands(self) -> dict[str, Command]:
        return self.registry.commands

    # ==============================
    # Registration
    # ==============================

    def register(self, groups: Iterable[tuple[str, str]]) -> None:
        """Register command groups, then import their commands and all events."""
        self.registry.register_groups(groups)
        self.load_commands()
        self.load_events()

    def load_commands(self) -> None:
        """Rebuild the commands from the group folders under the command path."""
        self.registry.load(lambda group: discover_commands(self.settings.command_path, group))
        self.registry.log_registered_commands(logger)

    def load_events(self) -> None:
        self.event_registry.load(discover_events(self.settings.event_path))
        logger.info(f"Event Registry: {len(self.event_registry.events)} events registered")

    def run(self) -> None:
        """Install the event listeners and start the client. Blocks until the client closes."""
        self.client.event(self.on_message)
        self.client.event(self.on_interaction)
        self.client.event(self.on_ready)
        self.client.run(get_token(self.settings.token), log_handler=None)

    # ==============================
    # Display helpers
    # ==============================

    async def get_effective_prefix(self, guild: Optional[discord.Guild] = None) -> str:
        """The prefix in use, for display purposes only."""
        if self.settings.use_slashes:
            return "/"
        if self.settings.prefix:
            return self.settings.prefix
        me = guild.me if guild is not None else None
        if me is not None:
            return f"@{me.nick or me.name} "
        return f"@{self.client.user.name if self.client.user else ''} "

    def get_embed_template(self, title: str, footer: Optional[str] = None) -> discord.Embed:
        """An embed with a title, the current time and the theme color."""
        embed = discord.Embed(
            title=title,
            color=discord.Color.from_str(self.settings.theme_color),
            timestamp=datetime.now(timezone.utc),
        )
        if footer:
            embed.set_footer(text=footer)
        return embed

    def _bot_mentions(self) -> tuple[str, ...]:
        if self.client.user is None:
            return ()
        return f"<@{self.client.user.id}>", f"<@!{self.client.user.id}>"

    # ==============================
    # Events
    # ==============================

    async def on_ready(self):
        if self.settings.use_slashes:
            await self.register_slashes()
        logger.info(f"Bot ready at {datetime.now(timezone.utc).isoformat()}")

    async def on_message(self, message: discord.Message):
        await self.handle_message(message)

    async def on_interaction(self, interaction: discord.Interaction):
        await self.handle_interaction(interaction)

    async def emit(self, kind: EventKind, data: EventData) -> None:
        """Await every event handler subscribed to `kind`, in registration order."""
        for event in self.event_registry.handlers_for(kind):
            await event.handler(self, data)

    # ==============================
    # Permission checks
    # ==============================

    async def check_permissions(
            self,
            command: Command,
            user: discord.abc.User,
            guild: Optional[discord.Guild],
            channel: Optional[discord.abc.Messageable] = None,
            interaction: Optional[discord.Interaction] = None
    ) -> None:
        """Validate that the bot and the invoking user may run a command.

        Owners bypass the user checks but not the bot checks. Permission
        flags are only checked inside a guild.

        Raises:
            PermissionDenied: With the text to show to the user
        """
        required = command.bot_permissions
        if required and guild is not None:
            if interaction is not None:
                granted = interaction.app_permissions
            else:
                granted = channel.permissions_for(guild.me)
            missing = required.missing_from(granted)
            if missing:
                raise PermissionDenied(BOT_MISSING_PERMISSIONS.format(", ".join(missing)),
                                       EventKind.CMD_BOT_MISSING_PERMISSION, missing)

        requirement = command.user_permissions
        if not requirement or self.settings.is_owner(user.id):
            return

        if requirement is BOT_OWNER:
            raise PermissionDenied(USER_MISSING_PERMISSIONS, EventKind.CMD_USER_MISSING_PERMISSION,
                                   (requirement.value,))
        elif requirement is GUILD_OWNER:
            if guild is None or guild.owner_id != user.id:
                raise PermissionDenied(USER_MISSING_PERMISSIONS, EventKind.CMD_USER_MISSING_PERMISSION,
                                       (requirement.value,))
        elif isinstance(requirement, FlagSet):
            if guild is None:
                return
            if interaction is not None:
                granted = interaction.permissions
            else:
                granted = channel.permissions_for(user)
            missing = requirement.missing_from(granted)
            if missing:
                raise PermissionDenied(
                    f"{USER_MISSING_PERMISSIONS}\nRequired permissions: {', '.join(missing)}",
                    EventKind.CMD_USER_MISSING_PERMISSION, missing)
        else:
            raise TypeError(f"Unknown permission requirement {requirement!r} on command {command.name}")

    # ==============================
    # Text commands
    # ==============================

    def _strip_prefix(self, content: str) -> Optional[str]:
        """The message content after the prefix or bot mention, None if it has neither."""
        if self.settings.prefix:
            if content.startswith(self.settings.prefix):
                return content[len(self.settings.prefix):]
            return None
        for mention in self._bot_mentions():
            if content.startswith(mention):
                return content[len(mention):]
        return None

    async def handle_message(self, message: discord.Message) -> None:
        """Resolve a text message to a command and run it."""
        # Slash and text commands are mutually exclusive
        if self.settings.use_slashes or message.author.bot:
            return

        content = self._strip_prefix(message.content)
        if content is None:
            await self.emit(EventKind.MESSAGE, EventData(message=message))
            return

        words = content.split()
        if not words:
            return
        name, *tokens = words

        command = self.registry.get(name)
        if command is None:
            return

        guild = message.guild
        try:
            await self.check_permissions(command, message.author, guild, channel=message.channel)
        except PermissionDenied as e:
            await safe_send(message.channel, str(e))
            await self.emit(e.kind, EventData(command=command, message=message, missing_permissions=e.missing))
            return

        try:
            arguments = await parse_arguments(self.client, command, tokens, guild)
        except ArgumentError:
            effective_prefix = await self.get_effective_prefix(guild)
            await safe_send(message.channel, INCORRECT_ARGUMENTS.format(effective_prefix, command.name))
            await self.emit(EventKind.CMD_INCORRECT_ARGUMENTS,
                            EventData(command=command, arguments=tuple(tokens), message=message))
            return

        data = CommandData(
            via_slash=False,
            channel=message.channel,
            user=message.author,
            member=message.author if guild is not None else None,
            message=message,
        )
        await command.handler(self, data, *arguments)

    # ==============================
    # Slash commands
    # ==============================

    async def register_slashes(self) -> None:
        """Synchronise the application commands with the registered commands.

        Remote commands that are no longer registered locally are deleted,
        and every local command is created or updated.
        """
        http = self.client.http
        application_id = self.client.application_id
        guild_id = self.settings.slash_guild_id

        if guild_id:
            remote_commands = await http.get_guild_commands(application_id, guild_id)
        else:
            remote_commands = await http.get_global_commands(application_id)

        for remote_command in remote_commands or []:
            if remote_command["name"] in self.registry:
                continue
            if guild_id:
                await http.delete_guild_command(application_id, guild_id, remote_command["id"])
            else:
                await http.delete_global_command(application_id, remote_command["id"])
            logger.info(f"Deleted slash command {remote_command['name']}")

        for command in self.registry:
            payload = build_payload(command)
            if guild_id:
                await http.upsert_guild_command(application_id, guild_id, payload)
            else:
                await http.upsert_global_command(application_id, payload)
        logger.info(f"Registered {len(self.registry)} slash commands"
                    + (f" in guild {guild_id}" if guild_id else ""))

    async def _acknowledge(self, interaction: discord.Interaction, mode: SlashResponse) -> None:
        if mode is SlashResponse.DEFER:
            await interaction.response.defer(thinking=True)
        elif mode is SlashResponse.EPHEMERAL:
            await interaction.response.defer(ephemeral=True, thinking=True)

    async def handle_interaction(self, interaction: discord.Interaction) -> None:
        """Resolve a slash interaction to a command and run it."""
        if (not self.settings.use_slashes
                or interaction.type != discord.InteractionType.application_command
                or interaction.user.bot):
            return

        interaction_data = interaction.data or {}
        command = self.registry.get(interaction_data.get("name", ""))
        if command is None:
            return

        guild = interaction.guild
        try:
            await self.check_permissions(command, interaction.user, guild, interaction=interaction)
        except PermissionDenied as e:
            await interaction.response.send_message(str(e), ephemeral=True)
            await self.emit(e.kind, EventData(command=command, interaction=interaction,
                                              missing_permissions=e.missing))
            return

        tokens = options_to_tokens(command, interaction_data.get("options", []))
        try:
            arguments = await parse_arguments(self.client, command, tokens, guild)
        except ArgumentError:
            await interaction.response.send_message(SLASH_FAILURE, ephemeral=True)
            await self.emit(EventKind.CMD_INCORRECT_ARGUMENTS,
                            EventData(command=command, arguments=tuple(tokens), interaction=interaction))
            return

        await self._acknowledge(interaction, command.slash_response)
        data = CommandData(
            via_slash=True,
            channel=interaction.channel,
            user=interaction.user,
            member=interaction.user if guild is not None else None,
            interaction=interaction,
        )
        await command.handler(self, data, *arguments)
