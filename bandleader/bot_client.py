from __future__ import annotations

import logging
import os
from typing import Optional

import discord

logger: logging.Logger

logger = logging.getLogger("bandleader")


def setup_logging(filename: str = "bandleader.log", level: int = logging.INFO) -> logging.Logger:
    """Attach a file handler to the wrapper logger and the discord.py logger."""
    handler = logging.FileHandler(filename=filename, encoding="utf-8", mode="w")
    handler.setFormatter(
        logging.Formatter("%(asctime)s:%(levelname)s:%(name)s: %(message)s")
    )
    logger.setLevel(level)
    logger.addHandler(handler)

    discord_logger = logging.getLogger("discord")
    discord_logger.setLevel(logging.WARNING)
    discord_logger.addHandler(handler)
    return logger


def create_client() -> discord.Client:
    """Create a client with the intents needed for prefix and slash commands."""
    intents = discord.Intents.default()
    # Prefix commands need the message text
    intents.message_content = True
    intents.members = True
    return discord.Client(intents=intents)


def get_token(configured: Optional[str] = None) -> str:
    """
    Returns the configured API token, falling back to 'token.txt' or a stub in testing environments.
    """
    if configured:
        return configured
    token_path = os.path.join(os.getcwd(), "token.txt")
    if os.path.isfile(token_path):
        with open(token_path) as tokenfile:
            return tokenfile.readline().strip()
    elif os.environ.get('TESTING'):
        return "dummy_token_for_testing"
    else:
        raise FileNotFoundError("token.txt not found and not in testing mode")
