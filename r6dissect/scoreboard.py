"""Scoreboard packets: kills, assists and score per player."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

log = logging.getLogger(__name__)


@dataclass
class ScoreboardPlayer:
    id: bytes = b""
    score: int = 0
    assists: int = 0
    assists_from_round: int = 0


@dataclass
class Scoreboard:
    players: list[ScoreboardPlayer] = field(default_factory=list)


def read_scoreboard_kills(reader) -> None:
    """Remember the latest killer reported by the scoreboard."""
    kills = reader.read_uint32()
    reader.skip(30)
    player_id = bytes(reader.read_bytes(4))
    index = reader.player_index_by_id(player_id)
    if index != -1:
        username = reader.header.players[index].username
        reader.last_killer_from_scoreboard = username
        log.warning("scoreboard_kill username=%s kills=%d", username, kills)


def read_scoreboard_assists(reader) -> None:
    """Record a player's assist count from the scoreboard."""
    assists = reader.read_uint32()
    if assists == 0:
        return
    reader.skip(30)
    player_id = bytes(reader.read_bytes(4))
    index = reader.player_index_by_id(player_id)
    username = "N/A"
    if index != -1:
        username = reader.header.players[index].username
        entry = reader.scoreboard.players[index]
        entry.assists = assists
        entry.assists_from_round += 1
    log.debug("scoreboard_assists assists=%d username=%s", assists, username)


def read_scoreboard_score(reader) -> None:
    """Record a player's score from the scoreboard."""
    score = reader.read_uint32()
    if score == 0:
        return
    reader.skip(13)
    player_id = bytes(reader.read_bytes(4))
    index = reader.player_index_by_id(player_id)
    username = "N/A"
    if index != -1:
        username = reader.header.players[index].username
        reader.scoreboard.players[index].score = score
    log.debug("scoreboard_score score=%d username=%s", score, username)