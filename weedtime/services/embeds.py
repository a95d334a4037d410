"""
weedtime.services.embeds — Discord embed builders for stat reports
===================================================================

All embed construction lives here so the stats cog only supplies data.
"""

from __future__ import annotations

import discord

from weedtime.constants import STATS_COLOR
from weedtime.database.models import GuildStats, UserStats


def _stats_embed(name: str, icon_url: str | None) -> discord.Embed:
    embed = discord.Embed(title="WEED STATS", color=discord.Color(STATS_COLOR))
    embed.set_author(name=name)
    if icon_url:
        embed.set_thumbnail(url=icon_url)
    return embed


def build_guild_stats_embed(
    guild_name: str, icon_url: str | None, stats: GuildStats
) -> discord.Embed:
    """Community totals: weed times, weed crimes, longest chain."""
    embed = _stats_embed(guild_name, icon_url)
    embed.add_field(name="Weed Times", value=str(stats.total_weed_times), inline=True)
    embed.add_field(name="Weed Crimes", value=str(stats.total_weed_crimes), inline=True)
    embed.add_field(name="Longest Chain", value=str(stats.longest_chain), inline=True)
    return embed


def build_user_stats_embed(
    display_name: str, avatar_url: str | None, stats: UserStats
) -> discord.Embed:
    """Participant totals: weed times, weed crimes, chains started/broken."""
    embed = _stats_embed(display_name, avatar_url)
    embed.add_field(name="Weed Times", value=str(stats.total_weed_times), inline=True)
    embed.add_field(name="Weed Crimes", value=str(stats.total_weed_crimes), inline=True)
    embed.add_field(name="Chains Started", value=str(stats.chains_started), inline=True)
    embed.add_field(name="Chains Broken", value=str(stats.chains_broken), inline=True)
    return embed
