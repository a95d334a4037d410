"""
weedtime.bot.__main__ — ``python -m weedtime.bot``
===================================================

Reads ``.env`` for secrets and ``config.yaml`` for soft settings, makes
sure the stats tables exist, then runs the bot until it is stopped.
Exits with status 1 when the token is missing.
"""

from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

from weedtime.bot.core import WeedTimeBot
from weedtime.config import load_config
from weedtime.database.engine import create_db_engine, init_db

LOG_FORMAT = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"

logger = logging.getLogger("weedtime")


def _token_or_exit() -> str:
    token = os.getenv("DISCORD_TOKEN", "")
    if token in ("", "your-discord-bot-token-here"):
        logger.critical("DISCORD_TOKEN is missing. Put your bot token in .env.")
        sys.exit(1)
    return token


def main() -> None:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, datefmt="%H:%M:%S")
    load_dotenv()
    token = _token_or_exit()

    cfg = load_config()
    logger.info(
        "Watching for %r at %d:%02d (AM and PM)",
        cfg.marker_phrase, cfg.trigger_hour, cfg.trigger_minute,
    )

    engine = create_db_engine()
    init_db(engine)

    bot = WeedTimeBot(cfg=cfg, engine=engine)
    try:
        # discord.py's own handler would duplicate our root config
        bot.run(token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Interrupted, chains in memory are discarded.")
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
