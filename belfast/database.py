"""Flat JSON datastore for per-user and per-server records.

The whole database lives in one JSON file. Entries are created on first
access, mutated in place by the cogs, and the file is rewritten wholesale
by `write_data()`.
"""
from __future__ import annotations

import json
import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from belfast.constants import DEFAULT_COINS, DEFAULT_GIVEAWAY_EMOTE
from belfast.exceptions import DatabaseError
from belfast.utils import write_json_atomic

logger = logging.getLogger('belfast_bot')

# Guild id used for records that are shared across servers (linked accounts)
GLOBAL_SCOPE = 0


class Warn(BaseModel):
    reason: str
    warner_id: int
    created_at: datetime = Field(default_factory=datetime.now)


class UserEntry(BaseModel):
    id: int = 0
    xp: int = 0
    warns: list[Warn] = Field(default_factory=list)
    anilist_name: Optional[str] = None
    osu_name: Optional[str] = None
    quaver_id: Optional[int] = None
    coins: int = DEFAULT_COINS
    last_daily: Optional[datetime] = None

    @property
    def level(self) -> int:
        return level_for_xp(self.xp)


class GiveawayEntry(BaseModel):
    end: datetime
    channel_id: int
    content: str
    reaction_message_id: int
    count: int = 1
    emote: Optional[str] = None


class ServerEntry(BaseModel):
    id: int = 0
    users: list[UserEntry] = Field(default_factory=list)
    giveaway_reaction_emote: str = DEFAULT_GIVEAWAY_EMOTE
    giveaways: list[GiveawayEntry] = Field(default_factory=list)


class DatabaseData(BaseModel):
    servers: list[ServerEntry] = Field(default_factory=list)


def level_for_xp(xp: int) -> int:
    """Level curve: floor(log base 1.1 of (xp + 80)) - 45, starting at 0."""
    return int(math.log(xp + 80, 1.1)) - 45


class JsonDatabase:
    """Flat JSON file acting as a key-value store keyed by (guild, user).

    Attributes:
        path: Location of the JSON file
        data: In-memory database contents (empty until initialize() is called)
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.data: DatabaseData = DatabaseData()

    async def initialize(self) -> None:
        """Load the database file, creating an empty one if it doesn't exist.

        Raises:
            DatabaseError: If the file exists but cannot be parsed
        """
        if not self.path.exists():
            logger.info(f"No database found at {self.path}, creating a new one")
            self.data = DatabaseData()
            self.write_data()
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                self.data = DatabaseData.model_validate(json.load(f))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.error(f"Failed to parse database {self.path}: {e}")
            raise DatabaseError(f"Could not load database: {e}") from e
        except OSError as e:
            raise DatabaseError(f"Could not read database: {e}") from e

        logger.info(f"Loaded database with {len(self.data.servers)} server(s)")

    def write_data(self) -> None:
        """Rewrite the whole database file.

        Raises:
            DatabaseError: If the file cannot be written
        """
        try:
            write_json_atomic(self.path, self.data.model_dump(mode="json"))
        except OSError as e:
            logger.error(f"Failed to write database {self.path}: {e}")
            raise DatabaseError(f"Could not write database: {e}") from e

    def get_server_entry(self, guild_id: int) -> ServerEntry:
        """Get the record for a guild, creating it on first access."""
        for server in self.data.servers:
            if server.id == guild_id:
                return server
        server = ServerEntry(id=guild_id)
        self.data.servers.append(server)
        logger.debug(f"Created server entry for {guild_id}")
        return server

    def get_user_entry(self, guild_id: int, user_id: int) -> UserEntry:
        """Get a user's record within a guild, creating it on first access.

        Use GLOBAL_SCOPE as guild_id for data shared across servers.
        """
        server = self.get_server_entry(guild_id)
        for user in server.users:
            if user.id == user_id:
                return user
        user = UserEntry(id=user_id)
        server.users.append(user)
        logger.debug(f"Created user entry for {user_id} in {guild_id}")
        return user

    def get_global_user_entry(self, user_id: int) -> UserEntry:
        return self.get_user_entry(GLOBAL_SCOPE, user_id)

    def all_giveaways(self) -> list[tuple[ServerEntry, GiveawayEntry]]:
        return [(server, giveaway) for server in self.data.servers for giveaway in server.giveaways]
