from datetime import datetime, timezone

import pytest

from r6dissect.errors import EndOfData, InvalidFileError, InvalidStringSeparatorError
from r6dissect.header import (
    detect_chunked_compression,
    read_header,
    read_header_magic,
    read_header_string,
)
from r6dissect.models import GameMode, Map, MatchType

PADDING = b"\xff" * 8


class ByteReader:
    def __init__(self, data):
        self.b = data
        self.offset = 0

    def skip(self, n):
        self.offset += n
        if self.offset >= len(self.b):
            raise EndOfData()

    def read_bytes(self, n):
        self.skip(n)
        return self.b[self.offset - n : self.offset]


def hstr(text):
    raw = text.encode()
    return bytes([len(raw)]) + b"\x00" * 7 + raw


def encode(items):
    return b"".join(hstr(k) + hstr(v) for k, v in items) + PADDING


BASE_ITEMS = [
    ("version", "Y8S1"),
    ("code", "7408213"),
    ("datetime", "2023-05-01-20-15-30"),
    ("matchtype", "2"),
    ("worldid", "1378191338"),
    ("recordingplayerid", "123"),
    ("recordingprofileid", "abc-profile"),
    ("additionaltags", ""),
    ("gamemodeid", "327933806"),
    ("roundspermatch", "12"),
    ("roundspermatchovertime", "3"),
    ("roundnumber", "4"),
    ("overtimeroundnumber", "0"),
    ("teamname0", "YOUR TEAM"),
    ("teamname1", "OPPONENTS"),
    ("gmsetting", "7"),
    ("gmsetting", "9"),
    ("playerid", "111"),
    ("playername", "alpha"),
    ("team", "0"),
    ("alliance", "1"),
    ("heroname", "5"),
    ("rolename", "Striker"),
    ("playerid", "222"),
    ("playername", "bravo"),
    ("team", "1"),
    ("playlistcategory", "3"),
    ("id", "match-1"),
    ("teamscore0", "2"),
    ("teamscore1", "1"),
]


def test_detect_plain_zstd():
    assert detect_chunked_compression(b"\x28\xb5\x2f\xfd\x00\x01") is False


def test_detect_chunked():
    assert detect_chunked_compression(b"dissect\x00") is True


def test_detect_invalid_magic():
    with pytest.raises(InvalidFileError):
        detect_chunked_compression(b"PK\x03\x04")


def test_detect_short_data():
    with pytest.raises(EndOfData):
        detect_chunked_compression(b"\x28")


def test_header_string_round_trip():
    reader = ByteReader(hstr("gamemodeid") + hstr("327933806") + PADDING)
    assert read_header_string(reader) == "gamemodeid"
    assert read_header_string(reader) == "327933806"
    assert reader.b[reader.offset :] == PADDING


def test_header_string_bad_separator():
    data = bytes([3]) + b"\x00" * 6 + b"\x01" + b"abc" + PADDING
    with pytest.raises(InvalidStringSeparatorError):
        read_header_string(ByteReader(data))


def test_header_magic_skips_version_block():
    prefix = b"dissect" + b"\x00" * 7 + b"\x09" + b"\x00" * 3 + b"\x02" + b"\x00" * 7
    reader = ByteReader(prefix + b"TAIL" + PADDING)
    read_header_magic(reader)
    assert reader.offset == len(prefix)


def test_header_magic_rejects_other_data():
    with pytest.raises(InvalidFileError):
        read_header_magic(ByteReader(b"notdiss" + PADDING))


def test_header_magic_truncated():
    with pytest.raises(EndOfData):
        read_header_magic(ByteReader(b"dissect" + b"\x00" * 3))


def test_read_header_fields():
    reader = ByteReader(encode(BASE_ITEMS))
    header = read_header(reader)
    assert reader.b[reader.offset :] == PADDING
    assert header.game_version == "Y8S1"
    assert header.code_version == 7408213
    assert header.timestamp == datetime(2023, 5, 1, 20, 15, 30, tzinfo=timezone.utc)
    assert header.match_type is MatchType.Ranked
    assert header.map is Map.KafeDostoyevsky
    assert header.game_mode is GameMode.Bomb
    assert header.recording_player_id == 123
    assert header.recording_profile_id == "abc-profile"
    assert header.additional_tags == ""
    assert header.rounds_per_match == 12
    assert header.rounds_per_match_overtime == 3
    assert header.round_number == 4
    assert header.overtime_round_number == 0
    assert [t.name for t in header.teams] == ["YOUR TEAM", "OPPONENTS"]
    assert [t.score for t in header.teams] == [2, 1]
    assert [t.starting_score for t in header.teams] == [0, 0]
    assert header.gm_settings == [7, 9]
    assert header.playlist_category == 3
    assert header.match_id == "match-1"


def test_read_header_players():
    header = read_header(ByteReader(encode(BASE_ITEMS)))
    assert [p.username for p in header.players] == ["alpha", "bravo"]
    alpha, bravo = header.players
    assert (alpha.id, alpha.team_index, alpha.alliance) == (111, 0, 1)
    assert alpha.hero_name == 5
    assert alpha.role_name == "Striker"
    assert (bravo.id, bravo.team_index) == (222, 1)


def test_read_header_starting_scores_from_y9s4():
    items = [(k, "8673114") if k == "code" else (k, v) for k, v in BASE_ITEMS]
    items[-1:-1] = [("startingteamscore0", "1"), ("startingteamscore1", "1")]
    header = read_header(ByteReader(encode(items)))
    assert [t.starting_score for t in header.teams] == [1, 1]
    assert [t.score for t in header.teams] == [2, 1]


def test_read_header_y9s4_requires_starting_scores():
    items = [(k, "8673114") if k == "code" else (k, v) for k, v in BASE_ITEMS]
    with pytest.raises(ValueError):
        read_header(ByteReader(encode(items)))


def test_read_header_bad_playlist_category_is_ignored():
    items = [(k, "x") if k == "playlistcategory" else (k, v) for k, v in BASE_ITEMS]
    header = read_header(ByteReader(encode(items)))
    assert header.playlist_category == 0
    assert header.match_id == "match-1"


def test_read_header_missing_code():
    items = [(k, v) for k, v in BASE_ITEMS if k != "code"]
    with pytest.raises(ValueError):
        read_header(ByteReader(encode(items)))


def test_read_header_bad_player_team():
    items = [(k, "zero") if k == "team" else (k, v) for k, v in BASE_ITEMS]
    with pytest.raises(ValueError):
        read_header(ByteReader(encode(items)))


def test_read_header_truncated():
    data = encode(BASE_ITEMS)[: -len(PADDING) - 20]
    with pytest.raises(EndOfData):
        read_header(ByteReader(data))