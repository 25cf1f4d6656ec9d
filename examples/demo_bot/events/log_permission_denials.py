import logging

from bandleader import BotEvent, EventKind

logger = logging.getLogger("bandleader")


async def run(wrapper, data):
    who = data.message.author if data.message is not None else data.interaction.user
    logger.info(f"{who} was denied {data.command.name}: missing {', '.join(data.missing_permissions)}")


event = BotEvent(
    name="log_permission_denials",
    triggers=(EventKind.CMD_BOT_MISSING_PERMISSION, EventKind.CMD_USER_MISSING_PERMISSION),
    handler=run,
)
