"""Built-in help command listing the registered commands."""
from typing import Optional

import discord

from bandleader.commands.command_enums import ArgumentType
from bandleader.commands.registry import ArgumentDefinition, Command


class HelpGenerator:
    """Generates help embeds from the command registry of a wrapper."""

    def __init__(self, wrapper):
        self.wrapper = wrapper

    async def create_overview_embed(self) -> discord.Embed:
        """Embed listing every command, one field per group."""
        effective_prefix = await self.wrapper.get_effective_prefix()
        registry = self.wrapper.registry
        settings = self.wrapper.settings

        embed = self.wrapper.get_embed_template(
            "__Available commands__", f"{effective_prefix}help command for details")
        if settings.support_link:
            embed.description = (
                f"Need help, or have questions or comments? "
                f"Join [{settings.support_title or 'the support server'}]({settings.support_link})!")

        for group in registry.sorted_groups():
            lines = [f"`{effective_prefix}{command.name}` - {command.description}"
                     for command in registry.commands_in_group(group)]
            if lines:
                embed.add_field(name=registry.group_description(group), value="\n".join(lines), inline=False)
        return embed

    def create_command_embed(self, command: Command) -> discord.Embed:
        """Embed describing a single command and its arguments."""
        embed = self.wrapper.get_embed_template(
            command.name, self.wrapper.registry.group_description(command.group))
        embed.description = command.description

        lines = []
        for argument in command.arguments:
            optional = "*[Optional]* " if argument.optional else ""
            lines.append(f"`{argument.name}` ({argument.type.value}) - {optional}{argument.description}")
            if argument.one_of:
                lines.append(f"⤷ Options: {', '.join(str(option) for option in argument.one_of)}")
        if lines:
            embed.add_field(name="Arguments", value="\n".join(lines), inline=False)
        return embed


async def help_command(wrapper, data, command_name: Optional[str] = None):
    generator = HelpGenerator(wrapper)
    if command_name is None:
        await data.reply(embed=await generator.create_overview_embed())
        return

    command = wrapper.registry.get(command_name)
    if command is None:
        await data.reply(f"There is no command called {command_name}.")
        return
    await data.reply(embed=generator.create_command_embed(command))


command = Command(
    name="help",
    description="Get a list of commands or details on a specific command.",
    handler=help_command,
    arguments=(
        ArgumentDefinition("command", "The command to get details on", ArgumentType.STRING, optional=True),
    ),
)
