"""Per-round and per-match player statistics derived from match feedback."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .models import MatchUpdate, MatchUpdateType


@dataclass
class PlayerRoundStats:
    """One player's statistics for a single round."""

    username: str = ""
    team_index: int = 0
    score: int = 0
    operator: str = ""
    kills: int = 0
    died: bool = False
    assists: int = 0
    headshots: int = 0
    headshot_percentage: float = 0.0
    one_vx: int = 0


@dataclass
class PlayerMatchStats:
    """One player's statistics summed over the rounds of a match."""

    username: str = ""
    team_index: int = 0
    rounds: int = 0
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    headshots: int = 0
    headshot_percentage: float = 0.0


def headshot_percentage(headshots: int, kills: int) -> float:
    """Return headshots as a percentage of kills, or 0 when there are no kills."""
    if kills == 0:
        return 0.0
    return headshots / kills * 100


def opening_kill(reader) -> MatchUpdate:
    """Return the first kill of the round, or an empty update."""
    return next(
        (u for u in reader.match_feedback if u.type == MatchUpdateType.Kill),
        MatchUpdate(),
    )


def opening_death(reader) -> MatchUpdate:
    """Return the first kill or death of the round, or an empty update."""
    return next(
        (
            u
            for u in reader.match_feedback
            if u.type in (MatchUpdateType.Kill, MatchUpdateType.Death)
        ),
        MatchUpdate(),
    )


def trades(reader) -> list[list[MatchUpdate]]:
    """Return pairs of consecutive updates where a kill was traded."""
    found: list[list[MatchUpdate]] = []
    previous = MatchUpdate()
    for update in reader.match_feedback:
        same_players = (
            previous.target == update.username or previous.username == update.target
        )
        within_threshold = previous.time_in_seconds - update.time_in_seconds <= 3
        if update.type == MatchUpdateType.Kill and same_players and within_threshold:
            found.append([previous, update])
        previous = update
    return found


def kills_and_deaths(reader) -> list[MatchUpdate]:
    """Return only the kill and death updates, in order."""
    return [
        u
        for u in reader.match_feedback
        if u.type in (MatchUpdateType.Kill, MatchUpdateType.Death)
    ]


def num_players(reader, team: int) -> int:
    """Count the players on team ``team``."""
    return sum(1 for p in reader.header.players if p.team_index == team)


def _one_vx(reader, stats, index, winning, last_death) -> None:
    alive = []
    last_death_was_winner = False
    for i, player in enumerate(reader.header.players):
        if player.team_index != winning:
            continue
        if not stats[i].died:
            alive.append(i)
        if i == last_death:
            last_death_was_winner = True
    if len(alive) == 1:
        last_standing = alive[0]
    elif not alive and last_death_was_winner:
        last_standing = last_death
    else:
        return
    username = stats[last_standing].username
    team_left = num_players(reader, winning)
    count = 0
    for update in reader.match_feedback:
        if update.type == MatchUpdateType.Kill:
            if stats[index.get(update.target, 0)].team_index == winning:
                team_left -= 1
        elif update.type in (MatchUpdateType.Death, MatchUpdateType.PlayerLeave):
            if stats[index.get(update.username, 0)].team_index == winning:
                team_left -= 1
        if update.username != username:
            continue
        if update.type == MatchUpdateType.Kill and team_left < 2:
            count += 1
    count += sum(1 for s in stats if s.team_index != winning and not s.died)
    stats[last_standing].one_vx = count


def player_stats(reader) -> list[PlayerRoundStats]:
    """Compute each player's statistics for the round held by ``reader``."""
    header = reader.header
    winning = 1 if header.teams[1].won else 0
    stats: list[PlayerRoundStats] = []
    index: dict[str, int] = {}
    for i, player in enumerate(header.players):
        board = reader.scoreboard.players[i]
        stats.append(
            PlayerRoundStats(
                username=player.username,
                team_index=player.team_index,
                operator=player.operator.name,
                assists=board.assists_from_round,
                score=board.score,
            )
        )
        index[player.username] = i
    last_death = -1
    for update in reader.match_feedback:
        i = index.get(update.username, 0)
        if update.type == MatchUpdateType.Kill:
            entry = stats[i]
            entry.kills += 1
            if update.headshot:
                entry.headshots += 1
            entry.headshot_percentage = headshot_percentage(entry.headshots, entry.kills)
            target = index.get(update.target, 0)
            stats[target].died = True
            last_death = target
        elif update.type == MatchUpdateType.Death:
            stats[i].died = True
            last_death = i
    _one_vx(reader, stats, index, winning, last_death)
    return stats


def match_player_stats(rounds: Iterable) -> list[PlayerMatchStats]:
    """Sum the per-round statistics of every round reader into match totals."""
    stats: list[PlayerMatchStats] = []
    index: dict[str, int] = {}
    for round_reader in rounds:
        for p in player_stats(round_reader):
            if p.username not in index:
                index[p.username] = len(stats)
                stats.append(PlayerMatchStats(username=p.username, team_index=p.team_index))
            entry = stats[index[p.username]]
            entry.rounds += 1
            entry.kills += p.kills
            if p.died:
                entry.deaths += 1
            entry.assists += p.assists
            entry.headshots += p.headshots
            entry.headshot_percentage = headshot_percentage(entry.headshots, entry.kills)
    return stats