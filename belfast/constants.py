"""Constants for Belfast.

Centralizes colors, emotes and limits so cogs and services can share them.
"""
from __future__ import annotations

VERSION = "1.3-Discord"

# ============================================================================
# COLOR PALETTE
# ============================================================================

COLOR_PRIMARY = 0x308ED6   # About / info embeds
COLOR_HELP = 0xFFAE0D      # Help listings
COLOR_OSU = 0xE664A0       # osu! pink
COLOR_QUAVER = 0x43EBFB    # Quaver cyan
COLOR_OTAKU = 0x2E51A2     # Anime / manga lookups
COLOR_JISHO = 0x56D926     # Jisho green
COLOR_WARNINGS = 0xF09E24  # Warning listings
COLOR_GIVEAWAY = 0xF5CD63  # Giveaway gold
COLOR_PROFILE = 0x9B59B6   # User profiles

# ============================================================================
# EMOTES
# ============================================================================

EMOTE_POUT = "😤"
EMOTE_SHOCK = "😨"
EMOTE_NOTE = "🎵"
EMOTE_COIN = "🪙"

PAGINATION_FIRST = "⏮"
PAGINATION_PREVIOUS = "◀"
PAGINATION_NEXT = "▶"
PAGINATION_LAST = "⏭"

DEFAULT_GIVEAWAY_EMOTE = "🎉"

# Rank grades shared by osu! and Quaver
RANK_EMOTES = {
    "X": "🏆 SS",
    "XH": "🥇 SS+",
    "SS": "🏆 SS",
    "S": "🥈 S",
    "SH": "🥈 S+",
    "A": "🟢 A",
    "B": "🔵 B",
    "C": "🟣 C",
    "D": "🔴 D",
    "F": "❌ F",
}

# ============================================================================
# LIMITS & TIMINGS
# ============================================================================

# Pagination
CALLBACK_BUFFER_SIZE = 16

# Rate limiting (per module)
RATE_LIMIT_PER_MINUTE = 45
RATE_LIMIT_WINDOW_SECONDS = 60

# Command handling
DEFAULT_COMMAND_TIMEOUT = 10  # Seconds

# Moderation
MAX_PURGE_AMOUNT = 100
DELETE_DELAY_NORMAL = 5  # Seconds before purge/limit notices are removed
KICK_WARN_COUNT = 2
DEFAULT_MAX_WARN_AMOUNT = 3

# Currency / levels
DEFAULT_COINS = 100
DAILY_COINS = 100
DAILY_COOLDOWN_SECONDS = 24 * 60 * 60
XP_REWARD_MIN = 1
XP_REWARD_MAX = 5
XP_REWARD_COOLDOWN_SECONDS = 60

# Giveaways
GIVEAWAY_CHECK_INTERVAL_SECONDS = 30

# Text shortening
DEFAULT_SHORTEN_LIMIT = 300
FAVORITE_SHORTEN_LIMIT = 25

# Discord limits
DISCORD_FIELD_MAX_CHARS = 1024

# Welcome messages: {0} is the member mention, {1} the guild name
DEFAULT_WELCOME_MESSAGES = [
    "Welcome to {1}, {0}! I Belfast will be looking after you.",
    "{0} has joined {1}. Please make yourself at home, Commander.",
]

DEFAULT_STATUS_MESSAGE = ":prefix:help | :serverCount: servers"
