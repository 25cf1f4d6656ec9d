from .command_data import CommandData
from .events import BotEvent, EventData, EventRegistry
from .permissions import BOT_OWNER, GUILD_OWNER, FlagSet, OwnerRequirement, flags
from .settings import WrapperSettings

__all__ = [
    'BOT_OWNER',
    'BotEvent',
    'CommandData',
    'EventData',
    'EventRegistry',
    'FlagSet',
    'GUILD_OWNER',
    'OwnerRequirement',
    'WrapperSettings',
    'flags',
]
