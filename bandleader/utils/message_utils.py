"""
Utility functions for handling Discord messages.
"""

from typing import Optional, List, Union

import discord

from bandleader import bot_client

MAX_MESSAGE_LENGTH = 2000


def _split_text(text: str, max_length: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """
    Split text into chunks of maximum length.

    Args:
        text: The text to split
        max_length: Maximum length of each chunk

    Returns:
        List of text chunks
    """
    return [text[i:i+max_length] for i in range(0, len(text), max_length)]


async def safe_send(
    channel: Union[discord.abc.Messageable, discord.Member, discord.User],
    content: Optional[str] = None,
    **kwargs
) -> Optional[discord.Message]:
    """
    Safely send a message to a channel, handling errors and long messages.

    Args:
        channel: The channel or user to send to
        content: The content of the message
        **kwargs: Additional message parameters

    Returns:
        The sent message or None if failed
    """
    try:
        # Handle empty content
        if not content and not any(k in kwargs for k in ['embed', 'embeds', 'file', 'files']):
            content = "\u200b"  # Zero-width space

        if content and len(content) > MAX_MESSAGE_LENGTH:
            chunks = _split_text(content)
            first_message = await channel.send(chunks[0], **kwargs)
            for chunk in chunks[1:]:
                await channel.send(chunk)
            return first_message

        return await channel.send(content, **kwargs)
    except discord.HTTPException as e:
        bot_client.logger.error(f"Failed to send message: {e}")
        return None


async def safe_send_dm(
    user: Union[discord.Member, discord.User],
    content: Optional[str] = None,
    **kwargs
) -> Optional[discord.Message]:
    """
    Safely send a DM to a user, handling errors.

    Args:
        user: The user to send to
        content: The content of the message
        **kwargs: Additional message parameters

    Returns:
        The sent message or None if failed
    """
    try:
        dm_channel = user.dm_channel
        if dm_channel is None:
            dm_channel = await user.create_dm()

        return await safe_send(dm_channel, content, **kwargs)
    except discord.HTTPException as e:
        bot_client.logger.error(f"Failed to send DM to {user.display_name}: {e}")
        return None
