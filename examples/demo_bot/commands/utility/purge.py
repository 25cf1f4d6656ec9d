from bandleader import ArgumentDefinition, ArgumentType, Command, flags


async def run(wrapper, data, amount):
    if data.message is not None:
        await data.message.delete()
    deleted = await data.channel.purge(limit=int(amount))
    await data.reply(f"Deleted {len(deleted)} messages.")


command = Command(
    name="purge",
    description="Delete the most recent messages of this channel.",
    handler=run,
    arguments=(
        ArgumentDefinition("amount", "How many messages to delete", ArgumentType.NUMBER, one_of=(5, 10, 25)),
    ),
    bot_permissions=flags("manage_messages", "read_message_history"),
    user_permissions=flags("manage_messages"),
)
