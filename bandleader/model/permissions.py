"""Permission requirements a command can declare for the bot or the invoking user."""
from __future__ import annotations

from enum import Enum
from typing import NamedTuple, Union

import discord


class OwnerRequirement(Enum):
    """Requirements that depend on who owns the bot or the guild rather than on permission flags."""
    BOT_OWNER = "BOT_OWNER"  # Only the configured owners of the bot
    GUILD_OWNER = "GUILD_OWNER"  # Only the owner of the guild the command is invoked in


class FlagSet(NamedTuple):
    """A set of discord.py permission flag names, e.g. ``manage_messages``."""
    flags: frozenset[str]

    @classmethod
    def of(cls, *flags: str) -> FlagSet:
        unknown = [flag for flag in flags if flag not in discord.Permissions.VALID_FLAGS]
        if unknown:
            raise ValueError(f"Unknown permission flag(s): {', '.join(unknown)}")
        return cls(frozenset(flags))

    def to_permissions(self) -> discord.Permissions:
        return discord.Permissions(**{flag: True for flag in self.flags})

    def missing_from(self, permissions: discord.Permissions) -> list[str]:
        """Names of the required flags that `permissions` does not grant, sorted."""
        return sorted(flag for flag in self.flags if not getattr(permissions, flag))

    def is_satisfied_by(self, permissions: discord.Permissions) -> bool:
        return self.to_permissions().is_subset(permissions)

    def __bool__(self) -> bool:
        return bool(self.flags)

    def __str__(self) -> str:
        return ", ".join(sorted(self.flags))


BOT_OWNER = OwnerRequirement.BOT_OWNER
GUILD_OWNER = OwnerRequirement.GUILD_OWNER

UserRequirement = Union[OwnerRequirement, FlagSet]


def flags(*names: str) -> FlagSet:
    """Shorthand for ``FlagSet.of`` when declaring commands."""
    return FlagSet.of(*names)
