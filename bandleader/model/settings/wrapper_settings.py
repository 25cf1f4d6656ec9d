from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from typing import Optional

from ._base_settings import _BaseSettings

_SETTINGS_FILENAME = 'bandleader.json'

DEFAULT_THEME_COLOR = "#1E90FF"  # CSS "Dodger Blue"


@dataclass
class WrapperSettings:
    """Static configuration of a bot wrapper."""
    # The token to log the bot in with. Falls back to token.txt when empty.
    token: Optional[str] = None
    # IDs of the owners of the bot. These users bypass all user permission checks.
    owners: list[int] = field(default_factory=list)
    # Command groups as [name, description] pairs, used by the bandleader entry point
    groups: list[list[str]] = field(default_factory=list)
    # Root folder holding one sub-folder of command modules per group
    command_path: str = "commands"
    # Folder holding event modules
    event_path: str = "events"
    # Use slash commands instead of prefixed text commands
    use_slashes: bool = False
    # Prefix for text commands. Mentioning the bot is used when empty.
    prefix: Optional[str] = None
    # Link to the support server, shown by the help command
    support_link: Optional[str] = None
    support_title: Optional[str] = None
    # Hexadecimal color used for embeds
    theme_color: str = DEFAULT_THEME_COLOR
    # Register slash commands only in the test guild (they show up instantly there)
    use_test_guild: bool = False
    test_guild_id: Optional[int] = None

    def is_owner(self, user_id: int) -> bool:
        return user_id in self.owners

    @property
    def slash_guild_id(self) -> Optional[int]:
        """The guild slash commands are registered in, None for global registration."""
        return self.test_guild_id if self.use_test_guild and self.test_guild_id else None

    # ==============================
    # Serialization/Deserialization
    # ==============================

    def save(self, filename: str = _SETTINGS_FILENAME) -> WrapperSettings:
        """Save settings to a JSON file."""
        settings = {f.name: getattr(self, f.name) for f in fields(self) if f.name != 'token'}
        _BaseSettings(filename, settings).save()
        return self

    @classmethod
    def load(cls, filename: str = _SETTINGS_FILENAME) -> WrapperSettings:
        """Load settings from a JSON file, relative paths resolved against the file's folder."""
        data = _BaseSettings.load(filename).as_dict()
        known = {f.name for f in fields(cls)}
        settings = cls(**{key: value for key, value in data.items() if key in known})
        settings.owners = [int(owner) for owner in settings.owners]
        if settings.test_guild_id is not None:
            settings.test_guild_id = int(settings.test_guild_id)
        base = os.path.dirname(os.path.abspath(filename))
        settings.command_path = os.path.join(base, settings.command_path)
        settings.event_path = os.path.join(base, settings.event_path)
        return settings
