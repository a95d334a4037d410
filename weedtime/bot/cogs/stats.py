"""
weedtime.bot.cogs.stats — Stat & Timezone Slash Commands
=========================================================

- /serverstats — the community's weed times, weed crimes, longest chain
- /userstats   — your (or another member's) weed times, crimes, chains
- /timezone    — set the community's UTC offset used for the 4:20 window

Guild-scoped commands invoked from a DM do nothing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands
from sqlalchemy.exc import SQLAlchemyError

from weedtime.database.engine import run_db
from weedtime.services.embeds import build_guild_stats_embed, build_user_stats_embed
from weedtime.services.stats_service import (
    get_guild_stats,
    get_or_create_user_stats,
    set_utc_offset,
    validate_utc_offset,
)

if TYPE_CHECKING:
    from weedtime.bot.core import WeedTimeBot

logger = logging.getLogger(__name__)


class Stats(commands.Cog, name="Stats"):
    """Community and member weed stats."""

    def __init__(self, bot: WeedTimeBot) -> None:
        self.bot = bot

    # -------------------------------------------------------------------
    # /serverstats
    # -------------------------------------------------------------------
    @app_commands.command(name="serverstats", description="Check your server weed stats")
    async def serverstats(self, interaction: discord.Interaction) -> None:
        if interaction.guild_id is None:
            return

        try:
            stats = await run_db(get_guild_stats, self.bot.engine, interaction.guild_id)
        except SQLAlchemyError:
            logger.exception("Error loading stats for guild %s", interaction.guild_id)
            await interaction.response.send_message(
                "Error loading stats, try again later.", ephemeral=True,
            )
            return

        if stats is None:
            await interaction.response.send_message(
                "No weed stats yet. Wait for 4:20.", ephemeral=True,
            )
            return

        guild = interaction.guild
        embed = build_guild_stats_embed(
            guild.name if guild else str(interaction.guild_id),
            guild.icon.url if guild and guild.icon else None,
            stats,
        )
        await interaction.response.send_message(embed=embed)

    # -------------------------------------------------------------------
    # /userstats
    # -------------------------------------------------------------------
    @app_commands.command(name="userstats", description="Check your or a friend's weed stats")
    @app_commands.describe(user="The user you want to see the stats of")
    async def userstats(
        self,
        interaction: discord.Interaction,
        user: discord.User | None = None,
    ) -> None:
        target = user or interaction.user

        try:
            stats = await run_db(get_or_create_user_stats, self.bot.engine, target.id)
        except (SQLAlchemyError, RuntimeError):
            logger.exception("Error loading stats for user %s", target.id)
            await interaction.response.send_message(
                "Error loading stats, try again later.", ephemeral=True,
            )
            return

        embed = build_user_stats_embed(
            target.display_name, target.display_avatar.url, stats,
        )
        await interaction.response.send_message(embed=embed)

    # -------------------------------------------------------------------
    # /timezone
    # -------------------------------------------------------------------
    @app_commands.command(name="timezone", description="Set the UTC offset used for weed time")
    @app_commands.describe(offset="Hours from UTC, e.g. -5 or 5.5")
    async def timezone(self, interaction: discord.Interaction, offset: float) -> None:
        if interaction.guild_id is None:
            return

        try:
            offset_seconds = validate_utc_offset(offset)
        except ValueError:
            await interaction.response.send_message(
                "Please enter a valid UTC Offset!", ephemeral=True,
            )
            return

        try:
            await run_db(set_utc_offset, self.bot.engine, interaction.guild_id, offset_seconds)
        except (SQLAlchemyError, RuntimeError):
            logger.exception("Error saving UTC offset for guild %s", interaction.guild_id)
            await interaction.response.send_message(
                "Error saving timezone, try again later.", ephemeral=True,
            )
            return

        await interaction.response.send_message("Timezone Updated!")


async def setup(bot: WeedTimeBot) -> None:
    await bot.add_cog(Stats(bot))
