"""Player packets, attacker operator swaps, spawn sites and team roles."""

from __future__ import annotations

import logging

from .models import MatchUpdate, MatchUpdateType, Operator, Player, TeamRole, operator_role
from .scoreboard import ScoreboardPlayer
from .version import Y7S2, Y7S4, Y8S2, Y9S3

log = logging.getLogger(__name__)

ID_INDICATOR = bytes([0x33, 0xD8, 0x3D, 0x4F, 0x23])
OLD_ID_INDICATOR = bytes([0xE6, 0xF9, 0x7D, 0x86])
SPAWN_INDICATOR = bytes([0xAF, 0x98, 0x99, 0xCA])
PROFILE_ID_INDICATOR = bytes([0x8A, 0x50, 0x9B, 0xD0])
OPERATOR_INDICATOR = bytes([0x40, 0xF2, 0x15, 0x04])
OLD_OPERATOR_INDICATOR = bytes([0x22, 0xA9, 0x26, 0x0B, 0xE4])
UI_ID_INDICATOR = bytes([0x38, 0xDF, 0xEE, 0x88])
CURRENT_SITE_PATTERN = bytes([0xFC, 0xC6, 0xA8, 0x60, 0x01])


def _is_defender(operator: int) -> bool:
    return (
        operator != Operator.Recruit
        and operator != 0
        and operator_role(operator) == TeamRole.Defense
    )


def _matches(reader, existing: Player, new: Player) -> bool:
    code = reader.header.code_version
    return (
        existing.username == new.username
        or (code < Y8S2 and existing.id == new.id and new.id != 0)
        or (code >= Y8S2 and existing.dissect_id == new.dissect_id)
        or (code <= Y7S2 and new.username.startswith(existing.username))
    )


def _read_player_body(reader) -> None:
    header = reader.header
    id_indicator = OLD_ID_INDICATOR if header.code_version <= Y7S2 else ID_INDICATOR
    username = reader.read_string()
    if header.code_version >= Y7S4:
        reader.seek(OPERATOR_INDICATOR)
        reader.skip(8)
        # The operator marker is sometimes sent twice; the repeat is ignored.
        if reader.read_bytes(1)[0] == 0x9D:
            return
    else:
        reader.seek(OLD_OPERATOR_INDICATOR)
    op = reader.read_uint64()
    if op == 0:
        log.debug("empty player slot?")
        return
    if reader.read_bytes(1)[0] != 0x22:
        log.warning("strange invalid player located op=%d", op)
        return
    reader.seek(id_indicator)
    dissect_id = bytes(reader.read_bytes(4))
    reader.seek(SPAWN_INDICATOR)
    spawn = reader.read_string()
    if spawn == "":
        reader.skip(10)
        if bytes(reader.read_bytes(1)) != b"\x1b":
            return
    team_index = 1 if reader.players_read > 5 else 0
    ui_id = 0
    if header.code_version >= Y9S3:
        reader.seek(UI_ID_INDICATOR)
        reader.skip(13)
        ui_id = reader.read_uint64()
    profile_id = ""
    unknown_id = 0
    if header.recording_profile_id:
        reader.seek(PROFILE_ID_INDICATOR)
        profile_id = reader.read_string()
        reader.skip(5)
        unknown_id = reader.read_uint64()
    else:
        log.debug("profileID not found, skipping")
    player = Player(
        id=unknown_id,
        profile_id=profile_id,
        username=username,
        team_index=team_index,
        operator=Operator(op),
        spawn=spawn,
        dissect_id=dissect_id,
        ui_id=ui_id,
    )
    # A defender's spawn cannot be detected here; the site stands in for it.
    if player.operator != Operator.Recruit and operator_role(player.operator) == TeamRole.Defense:
        player.spawn = header.site
    log.debug(
        "player username=%s team=%d op=%r profile=%s id=%s",
        username, team_index, player.operator, profile_id, dissect_id.hex(),
    )
    for existing in header.players:
        if _matches(reader, existing, player):
            existing.profile_id = player.profile_id
            existing.username = player.username
            existing.operator = player.operator
            existing.spawn = player.spawn
            existing.dissect_id = player.dissect_id
            existing.ui_id = player.ui_id
            return
    if username:
        header.players.append(player)


def read_player(reader) -> None:
    """Read a player packet and add or update the player in the header."""
    reader.players_read += 1
    try:
        _read_player_body(reader)
    finally:
        if reader.players_read == 10:
            derive_team_roles(reader)


def _record_swap(reader, player: Player, operator: Operator) -> None:
    player.operator = operator
    update = MatchUpdate(
        type=MatchUpdateType.OperatorSwap,
        username=player.username,
        time=reader.time_raw,
        time_in_seconds=reader.time,
        operator=operator,
    )
    reader.match_feedback.append(update)
    log.debug("match_update %r", update)


def read_atk_op_swap(reader) -> None:
    """Read an attacker operator swap and record it."""
    operator = Operator(reader.read_uint64())
    players = reader.header.players
    if reader.header.code_version < Y9S3:
        reader.skip(5)
        player_id = bytes(reader.read_bytes(4))
        index = reader.player_index_by_id(player_id)
        log.debug("atk_op_swap id=%s op=%r", player_id.hex(), operator)
        if index > -1:
            _record_swap(reader, players[index], operator)
        return
    reader.skip(402)
    ui_id = reader.read_uint64()
    player = next((p for p in players if p.ui_id == ui_id), None)
    if player is not None:
        _record_swap(reader, player, operator)


def read_spawn(reader) -> None:
    """Read a location packet and set the defended site when it names one."""
    location = reader.read_string()
    reader.skip(150)
    pattern = bytes(reader.read_bytes(5))
    if "<br/>" not in location:
        return
    log.debug("site %s", location)
    header = reader.header
    if header.site and pattern != CURRENT_SITE_PATTERN:
        return
    formatted = location.replace("<br/>", ", ", 1)
    log.debug("defense site %s", formatted)
    for player in header.players:
        defense_team = header.teams[player.team_index].role == TeamRole.Defense
        if defense_team or _is_defender(player.operator):
            player.spawn = formatted
    header.site = formatted


def derive_team_roles(reader) -> None:
    """Drop players without an operator and set team roles from the operators."""
    header = reader.header
    log.debug("deriving team roles from %d players", len(header.players))
    if len(header.players) > 10:
        log.warning("tracked players greater than 10")
    kept = []
    for player in header.players:
        if player.operator != 0:
            kept.append(player)
            reader.scoreboard.players.append(ScoreboardPlayer(id=player.dissect_id))
        else:
            log.warning("operator id was 0, removing %s from list", player.username)
    header.players = kept
    for player in kept:
        if player.operator == Operator.Recruit:
            continue
        role = operator_role(player.operator)
        team = player.team_index
        other = team ^ 1
        if role == TeamRole.Attack:
            header.teams[team].role = TeamRole.Attack
            header.teams[other].role = TeamRole.Defense
        else:
            header.teams[team].role = TeamRole.Defense
            header.teams[other].role = TeamRole.Attack
        break