"""Round clock packets and the end-of-round winner decision."""

from __future__ import annotations

import logging
import re
from collections import Counter

from .models import MatchUpdateType, TeamRole, WinCondition
from .version import Y9S4

log = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?[0-9]+")


def _atoi(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid integer {text!r}")
    return int(text)


def read_time(reader) -> None:
    """Read the remaining round time as whole seconds."""
    seconds = reader.read_uint32()
    reader.time = float(seconds)
    reader.time_raw = f"{seconds // 60}:{seconds % 60:02d}"


def read_y7_time(reader) -> None:
    """Read the remaining round time in the older text form ("m:ss" or "s.ss")."""
    text = reader.read_string()
    parts = text.split(":")
    if len(parts) == 1:
        try:
            seconds = float(parts[0])
        except ValueError as exc:
            raise ValueError(f"invalid time {text!r}") from exc
        reader.time = seconds
        reader.time_raw = parts[0]
        return
    minutes = _atoi(parts[0])
    seconds = _atoi(parts[1])
    reader.time = float(minutes * 60 + seconds)
    reader.time_raw = text


def _team_of(reader, username: str) -> int:
    index = reader.player_index_by_username(username)
    if index < 0:
        raise LookupError(f"unknown player {username!r}")
    return reader.header.players[index].team_index


def round_end(reader) -> None:
    """Decide which team won the round and how, from the match feedback."""
    log.debug("round_end")
    header = reader.header
    sizes = Counter(p.team_index for p in header.players)
    roles = {p.team_index: header.teams[p.team_index].role for p in header.players}
    deaths: Counter[int] = Counter()
    planter = -1

    if header.code_version >= Y9S4:
        team0_won = header.teams[0].starting_score < header.teams[0].score
        header.teams[0].won = team0_won
        header.teams[1].won = not team0_won

    for update in reader.match_feedback:
        if update.type == MatchUpdateType.Kill:
            deaths[_team_of(reader, update.target)] += 1
        elif update.type == MatchUpdateType.Death:
            deaths[_team_of(reader, update.username)] += 1
        elif update.type == MatchUpdateType.DefuserPlantComplete:
            planter = reader.player_index_by_username(update.username)
        elif update.type == MatchUpdateType.DefuserDisableComplete:
            team = header.teams[_team_of(reader, update.username)]
            team.won = True
            team.win_condition = WinCondition.DisabledDefuser
            return

    if planter > -1:
        team = header.teams[header.players[planter].team_index]
        team.won = True
        team.win_condition = WinCondition.DefusedBomb
        return

    # From Y9S4 the header scores already tell who won.
    if header.code_version >= Y9S4:
        return

    if deaths[0] == sizes[0]:
        header.teams[1].won = True
        header.teams[1].win_condition = WinCondition.KilledOpponents
        return
    if deaths[1] == sizes[1]:
        header.teams[0].won = True
        header.teams[0].win_condition = WinCondition.KilledOpponents
        return

    winner = 1 if roles.get(1) == TeamRole.Defense else 0
    header.teams[winner].won = True
    header.teams[winner].win_condition = WinCondition.Time