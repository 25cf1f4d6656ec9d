import asyncio

from bandleader import ArgumentDefinition, ArgumentType, Command
from bandleader.utils import safe_send_dm


async def run(wrapper, data, duration, text="Time's up!"):
    await data.reply(f"I'll remind you in {duration} by DM.")
    await asyncio.sleep(duration.as_timedelta().total_seconds())
    await safe_send_dm(data.user, f"⏰ {text}")


command = Command(
    name="remind",
    description="Remind you of something after a while.",
    handler=run,
    arguments=(
        ArgumentDefinition("duration", "How long to wait, e.g. 10m", ArgumentType.DURATION),
        ArgumentDefinition("text", "What to remind you of", ArgumentType.STRING, optional=True, rest=True),
    ),
)
