"""
weedtime.bot.core — Bot Instance & Cog Loader
==============================================

Defines :class:`WeedTimeBot`, a ``commands.Bot`` subclass that:

1. Stores the shared config (``bot.cfg``) and DB engine (``bot.engine``).
2. Owns the process-wide chain tracker and message pipeline, so every
   channel's chain lives in exactly one place.
3. Loads every Cog listed in :data:`EXTENSIONS`.
4. Syncs the slash-command tree on startup (guild-scoped when
   ``DEV_GUILD_ID`` is set, global otherwise).
"""

from __future__ import annotations

import logging
import os

import discord
from discord.ext import commands
from sqlalchemy import Engine

from weedtime.bot.transport import DiscordTransport
from weedtime.config import WeedTimeConfig
from weedtime.engine.chain import ChainPolicy, ChainTracker
from weedtime.engine.classifier import TriggerWindow
from weedtime.services.weed_time_service import WeedTimePipeline

logger = logging.getLogger(__name__)

EXTENSIONS: list[str] = [
    "weedtime.bot.cogs.weed_time",
    "weedtime.bot.cogs.stats",
]


def build_pipeline(
    cfg: WeedTimeConfig, engine: Engine, transport
) -> WeedTimePipeline:
    """Wire tracker + pipeline from *cfg*."""
    policy = ChainPolicy(
        marker=cfg.marker_phrase,
        enforce_unique_participants=cfg.enforce_unique_participants,
        first_continuation_is_new_chain=cfg.first_continuation_is_new_chain,
        weed_image_path=cfg.weed_image_path,
        combo_prefix=cfg.combo_prefix,
        combo_digits=cfg.combo_digits,
    )
    tracker = ChainTracker(transport, policy)
    return WeedTimePipeline(
        engine,
        tracker,
        transport,
        window=TriggerWindow(cfg.trigger_hour, cfg.trigger_minute),
        marker=cfg.marker_phrase,
        crime_image_path=cfg.crime_image_path,
        crime_message=cfg.crime_message,
    )


class WeedTimeBot(commands.Bot):
    """Custom Bot subclass that carries project-wide state.

    Parameters
    ----------
    cfg:
        The parsed :class:`WeedTimeConfig` from ``config.yaml``.
    engine:
        A SQLAlchemy :class:`Engine` for the stats tables.
    """

    def __init__(self, cfg: WeedTimeConfig, engine: Engine) -> None:
        intents = discord.Intents.default()
        intents.message_content = True    # Privileged: marker detection
        intents.presences = False

        super().__init__(
            command_prefix=cfg.bot_prefix,
            intents=intents,
            description="It's weed time somewhere.",
        )

        self.cfg = cfg
        self.engine = engine
        self.transport = DiscordTransport(self)
        self.pipeline = build_pipeline(cfg, engine, self.transport)

    @property
    def tracker(self) -> ChainTracker:
        return self.pipeline.tracker

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Load all Cog extensions.  One broken Cog doesn't stop the rest."""
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

    async def on_ready(self) -> None:
        """Fired when the bot has connected and the cache is populated."""
        assert self.user is not None  # guaranteed after on_ready
        logger.info("Logged in as %s (ID: %s)", self.user.name, self.user.id)

        dev_guild_id = os.getenv("DEV_GUILD_ID")
        if dev_guild_id:
            guild = discord.Object(id=int(dev_guild_id))
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
            logger.info("Synced %d commands to dev guild %s", len(synced), dev_guild_id)
        else:
            synced = await self.tree.sync()
            logger.info("Synced %d commands globally", len(synced))

    async def close(self) -> None:
        logger.info("Bot shutting down…")
        await super().close()
