"""Enums for command arguments, slash acknowledgements and wrapper events."""

from enum import Enum


class ArgumentType(Enum):
    """Types a command argument can be coerced to."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DURATION = "duration"
    USER = "user"
    ROLE = "role"
    CHANNEL = "channel"


class SlashResponse(Enum):
    """How a slash interaction is acknowledged before the command handler runs."""
    DEFER = "defer"  # Public "thinking..." acknowledgement, answered through the followup webhook
    EPHEMERAL = "ephemeral"  # Same, but only visible to the invoking user
    NONE = "none"  # The handler responds through interaction.response itself


class EventKind(Enum):
    """Things that happen inside the wrapper that event modules can subscribe to."""
    MESSAGE = "message"  # A text message that did not invoke a command
    CMD_BOT_MISSING_PERMISSION = "cmd_bot_missing_permission"
    CMD_USER_MISSING_PERMISSION = "cmd_user_missing_permission"
    CMD_INCORRECT_ARGUMENTS = "cmd_incorrect_arguments"
