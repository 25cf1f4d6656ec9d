import logging
import sys

import discord

from bandleader.bot_client import setup_logging
from bandleader.bot_impl import BotWrapper
from bandleader.model.settings import WrapperSettings


class BotApp:
    def __init__(self, settings: WrapperSettings):
        self.settings = settings

    def run(self):
        print("Starting bot...")
        print("discord version is " + discord.__version__)
        wrapper = BotWrapper(self.settings)
        wrapper.register([tuple(group) for group in self.settings.groups])
        active = True
        while active:
            try:
                wrapper.run()
                print("ending bot...")
                active = False
            except discord.LoginFailure:
                logging.exception("Invalid token, not restarting")
                active = False
            except Exception as e:
                logging.exception("Ignoring exception")
                print(str(e))
                print("Restarting the bot")
                wrapper.client.clear()


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    settings_file = argv[0] if argv else "bandleader.json"
    setup_logging()
    BotApp(WrapperSettings.load(settings_file)).run()


if __name__ == "__main__":
    main()
