from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

import discord

from bandleader.utils import message_utils


@dataclass
class CommandData:
    """Data passed to a command handler, created fresh for every invocation."""
    via_slash: bool
    channel: discord.abc.Messageable
    user: Union[discord.User, discord.Member]
    member: Optional[discord.Member] = None  # None when invoked from a DM
    message: Optional[discord.Message] = None  # None when invoked through a slash command
    interaction: Optional[discord.Interaction] = None  # None when invoked through a message

    @property
    def guild(self) -> Optional[discord.Guild]:
        if self.member is not None:
            return self.member.guild
        return getattr(self.channel, "guild", None)

    async def reply(self, content: Optional[str] = None, **kwargs) -> Optional[discord.Message]:
        """Answer the invocation.

        Slash invocations that were already acknowledged are answered through
        the interaction followup so the "thinking" state is resolved; anything
        else is sent to the channel. The sent message is returned so it can be
        edited later.
        """
        if self.interaction is not None and self.interaction.response.is_done():
            if not content and not any(k in kwargs for k in ("embed", "embeds", "file", "files")):
                content = "\u200b"  # Zero-width space
            return await self.interaction.followup.send(content, wait=True, **kwargs)
        return await message_utils.safe_send(self.channel, content, **kwargs)
