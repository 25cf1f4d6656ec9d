import os

from bandleader.bot_app import main

if __name__ == "__main__":
    # Put the bot token in token.txt in the working directory, or under "token" in bandleader.json
    main([os.path.join(os.path.dirname(os.path.abspath(__file__)), "bandleader.json")])
