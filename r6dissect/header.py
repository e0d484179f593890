"""Reading of the replay header: magic, key/value strings and header fields."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from .errors import EndOfData, InvalidFileError, InvalidStringSeparatorError
from .models import GameMode, Header, Map, MatchType, Player
from .version import Y9S4

log = logging.getLogger(__name__)

STRING_SEPARATOR = b"\x00" * 7
ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"
CHUNKED_MAGIC = b"diss"

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT_RE = re.compile(r"[0-9]+")
_UINT64_LIMIT = 1 << 64

_PLAYER_INT_FIELDS = {
    "team": "team_index",
    "heroname": "hero_name",
    "alliance": "alliance",
    "roleimage": "role_image",
    "roleportrait": "role_portrait",
}


def _atoi(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid integer {text!r}")
    return int(text)


def _parse_uint(text: str) -> int:
    if not _UINT_RE.fullmatch(text):
        raise ValueError(f"invalid unsigned integer {text!r}")
    value = int(text)
    if value >= _UINT64_LIMIT:
        raise ValueError(f"unsigned integer out of range {text!r}")
    return value


def detect_chunked_compression(data: bytes) -> bool:
    """Tell from the first four bytes whether the file uses chunked compression.

    Returns False for a plain zstd stream and True for a chunked dissect file.
    """
    magic = bytes(data[:4])
    if len(magic) < 4:
        raise EndOfData()
    if magic == ZSTD_MAGIC:
        return False
    if magic == CHUNKED_MAGIC:
        return True
    raise InvalidFileError()


def read_header_magic(reader) -> None:
    """Check the dissect magic and skip past the versioning block that follows."""
    if bytes(reader.read_bytes(7)) != b"dissect":
        raise InvalidFileError()
    # The block ends after the second run of seven zero bytes.
    zeros = 0
    runs = 0
    while runs != 2:
        byte = reader.read_bytes(1)[0]
        if byte == 0:
            if zeros != 6:
                zeros += 1
            else:
                zeros = 0
                runs += 1
        else:
            zeros = 0


def read_header_string(reader) -> str:
    """Read one length-prefixed, separator-delimited header string."""
    length = reader.read_bytes(1)[0]
    if bytes(reader.read_bytes(7)) != STRING_SEPARATOR:
        raise InvalidStringSeparatorError()
    return bytes(reader.read_bytes(length)).decode("utf-8", errors="replace")


def _read_properties(reader) -> tuple[dict[str, str], list[int], list[Player]]:
    props: dict[str, str] = {}
    gm_settings: list[int] = []
    players: list[Player] = []
    current = Player()
    player_data = False
    while "teamscore1" not in props:
        key = read_header_string(reader)
        value = read_header_string(reader)
        if key == "playerid":
            if player_data:
                players.append(current)
            player_data = True
            current = Player()
        if key in ("playlistcategory", "id") and player_data:
            players.append(current)
            player_data = False
        if not player_data:
            if key == "gmsetting":
                gm_settings.append(_atoi(value))
            else:
                props[key] = value
        elif key == "playerid":
            current.id = _parse_uint(value)
        elif key == "playername":
            current.username = value
        elif key == "rolename":
            current.role_name = value
        elif key in _PLAYER_INT_FIELDS:
            setattr(current, _PLAYER_INT_FIELDS[key], _atoi(value))
        else:
            props[key] = value
    return props, gm_settings, players


def read_header(reader) -> Header:
    """Read the header properties up to the last team score and build a Header."""
    props, gm_settings, players = _read_properties(reader)

    def prop(key: str) -> str:
        return props.get(key, "")

    header = Header(players=players, gm_settings=gm_settings)
    header.game_version = prop("version")
    header.code_version = _atoi(prop("code"))
    try:
        stamp = datetime.strptime(prop("datetime"), "%Y-%m-%d-%H-%M-%S")
    except ValueError as exc:
        raise ValueError(f"invalid header timestamp {prop('datetime')!r}") from exc
    header.timestamp = stamp.replace(tzinfo=timezone.utc)
    header.match_type = MatchType(_atoi(prop("matchtype")))
    header.map = Map(_atoi(prop("worldid")))
    header.recording_player_id = _parse_uint(prop("recordingplayerid"))
    header.recording_profile_id = prop("recordingprofileid")
    header.additional_tags = prop("additionaltags")
    header.game_mode = GameMode(_atoi(prop("gamemodeid")))
    header.rounds_per_match = _atoi(prop("roundspermatch"))
    header.rounds_per_match_overtime = _atoi(prop("roundspermatchovertime"))
    header.round_number = _atoi(prop("roundnumber"))
    header.overtime_round_number = _atoi(prop("overtimeroundnumber"))
    header.teams[0].name = prop("teamname0")
    header.teams[1].name = prop("teamname1")
    if prop("playlistcategory"):
        try:
            header.playlist_category = _atoi(prop("playlistcategory"))
        except ValueError as exc:
            log.debug("omitting playlistcategory: %s", exc)
            header.playlist_category = 0
    header.match_id = prop("id")
    header.teams[0].score = _atoi(prop("teamscore0"))
    header.teams[1].score = _atoi(prop("teamscore1"))
    if header.code_version >= Y9S4:
        header.teams[0].starting_score = _atoi(prop("startingteamscore0"))
        header.teams[1].starting_score = _atoi(prop("startingteamscore1"))
    return header