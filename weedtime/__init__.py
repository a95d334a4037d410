"""
Weed Time — A 4:20 Combo Tracker for Discord
=============================================
Watches chat for "weed time" at 4:20, strings consecutive posts in a
channel into combo chains, calls out weed crimes committed at any other
time, and keeps per-server and per-member stats.

Package layout::

    weedtime/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Combo emoji rendering, colors
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # guild_stats, user_stats
    ├── engine/
    │   ├── events.py      # Classified outcomes (NewChain, ChainContinued, …)
    │   ├── classifier.py  # 4:20 window + marker checks (pure)
    │   ├── chain.py       # Per-channel chain state machine
    │   └── transport.py   # Chat transport contract
    ├── services/
    │   ├── record_store.py       # Keyed get / insert / locked update
    │   ├── stats_service.py      # Event → stat merges, offsets
    │   ├── weed_time_service.py  # Message pipeline
    │   └── embeds.py             # Stat embeds
    └── bot/
        ├── core.py        # Bot subclass, cog loader
        ├── transport.py   # discord.py transport
        └── cogs/
            ├── weed_time.py  # on_message → pipeline
            └── stats.py      # /serverstats, /userstats, /timezone
"""

__version__ = "0.1.0"
