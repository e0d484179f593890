"""Match feedback packets: kills, deaths, messages and defuser activity."""

from __future__ import annotations

import logging

from .errors import DissectError
from .models import MatchUpdate, MatchUpdateType
from .version import Y9S1, Y9S1_UPDATE3

log = logging.getLogger(__name__)

ACTIVITY2 = bytes([0x00, 0x00, 0x00, 0x22, 0xE3, 0x09, 0x00, 0x79])
KILL_INDICATOR = bytes([0x22, 0xD9, 0x13, 0x3C, 0xBA])


def _record(reader, update: MatchUpdate) -> None:
    reader.match_feedback.append(update)
    log.debug("match_update %r", update)


def _skip_to_size(reader) -> None:
    code = reader.header.code_version
    if code >= Y9S1_UPDATE3:
        reader.skip(38)
    elif code >= Y9S1:
        reader.skip(9)
        if reader.read_int() != 4:
            raise DissectError("match feedback failed valid check")
        reader.skip(24)
    else:
        reader.skip(1)
        reader.seek(ACTIVITY2)


def _read_kill(reader) -> None:
    kill_trace = bytes(reader.read_bytes(5))
    if kill_trace != KILL_INDICATOR:
        log.debug("killTrace %s", kill_trace.hex())
        return
    username = reader.read_string()
    empty = not username
    if empty:
        log.debug("kill username empty")
    # The meaning of these 15 bytes is unknown.
    reader.skip(15)
    target = reader.read_string()
    if empty:
        if target:
            _record(
                reader,
                MatchUpdate(
                    type=MatchUpdateType.Death,
                    username=target,
                    time=reader.time_raw,
                    time_in_seconds=reader.time,
                ),
            )
            log.debug("kill username empty because of death")
        return
    update = MatchUpdate(
        type=MatchUpdateType.Kill,
        username=username,
        target=target,
        time=reader.time_raw,
        time_in_seconds=reader.time,
    )
    reader.skip(56)
    update.headshot = reader.read_int() == 1
    if any(
        existing.type == MatchUpdateType.Kill
        and existing.username == update.username
        and existing.target == update.target
        for existing in reader.match_feedback
    ):
        return
    if reader.last_killer_from_scoreboard != username:
        update.username_from_scoreboard = reader.last_killer_from_scoreboard
    _record(reader, update)


def _classify(message: str) -> MatchUpdateType:
    kind = MatchUpdateType.Other
    if "bombs" in message or "objective" in message:
        kind = MatchUpdateType.LocateObjective
    if "BattlEye" in message:
        kind = MatchUpdateType.Battleye
    if "left" in message:
        kind = MatchUpdateType.PlayerLeave
    return kind


def read_match_feedback(reader) -> None:
    """Read a kill-feed or message packet and record it as a match update."""
    _skip_to_size(reader)
    size = reader.read_int()
    if size == 0:
        _read_kill(reader)
        return
    # Messages other than kills changed from Y9S1 onwards and are not read.
    if reader.header.code_version >= Y9S1:
        return
    message = bytes(reader.read_bytes(size)).decode("utf-8", errors="replace")
    kind = _classify(message)
    username = message.split(" ")[0]
    if kind == MatchUpdateType.Other:
        username = ""
    else:
        message = ""
    _record(
        reader,
        MatchUpdate(
            type=kind,
            username=username,
            time=reader.time_raw,
            time_in_seconds=reader.time,
            message=message,
        ),
    )


def read_defuser_timer(reader) -> None:
    """Read a defuser timer packet and record plant or disable activity."""
    timer = reader.read_string()
    reader.skip(34)
    player_id = bytes(reader.read_bytes(4))
    index = reader.player_index_by_id(player_id)
    kind = (
        MatchUpdateType.DefuserDisableStart
        if reader.planted
        else MatchUpdateType.DefuserPlantStart
    )
    if index > -1:
        _record(
            reader,
            MatchUpdate(
                type=kind,
                username=reader.header.players[index].username,
                time=reader.time_raw,
                time_in_seconds=reader.time,
            ),
        )
        reader.last_defuser_player_index = index
    # A timer of 0.00 may also show up when the defuser was not disabled.
    if not timer.startswith("0.00"):
        return
    kind = MatchUpdateType.DefuserDisableComplete
    if not reader.planted:
        kind = MatchUpdateType.DefuserPlantComplete
        reader.planted = True
    _record(
        reader,
        MatchUpdate(
            type=kind,
            username=reader.header.players[reader.last_defuser_player_index].username,
            time=reader.time_raw,
            time_in_seconds=reader.time,
        ),
    )