"""Built-in reload command rebuilding commands and events without a restart."""
from bandleader.commands.command_enums import SlashResponse
from bandleader.commands.registry import Command
from bandleader.model.permissions import BOT_OWNER


async def reload_command(wrapper, data):
    """Reload all commands and events from disk, and the slash commands if enabled."""
    reply = await data.reply("🔄 Reloading commands...")
    wrapper.load_commands()
    if wrapper.settings.use_slashes:
        await wrapper.register_slashes()
    wrapper.load_events()
    if reply is not None:
        await reply.edit(content="✅ Commands reloaded!")


command = Command(
    name="reload",
    description="Reload all currently loaded commands.",
    handler=reload_command,
    user_permissions=BOT_OWNER,
    slash_response=SlashResponse.DEFER,
)
