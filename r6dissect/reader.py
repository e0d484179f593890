"""Replay reader: decompression, byte-level reading and pattern listeners."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Callable, Iterator

import zstandard

from .clock import read_time, read_y7_time, round_end
from .errors import DissectError, EndOfData
from .feedback import read_defuser_timer, read_match_feedback
from .header import (
    ZSTD_MAGIC,
    detect_chunked_compression,
    read_header,
    read_header_magic,
)
from .models import Header, MatchUpdate
from .player import read_atk_op_swap, read_player, read_spawn
from .scoreboard import (
    Scoreboard,
    read_scoreboard_assists,
    read_scoreboard_kills,
    read_scoreboard_score,
)
from .version import Y8S1

log = logging.getLogger(__name__)

Listener = Callable[["Reader"], Any]

_SCAN_BLOCKS = 5


def _advance(data: bytes, query: bytes, start: int, stop: int, state: int) -> int:
    """Run the resetting matcher over data[start:stop] from ``state``."""
    length = len(query)
    for byte in data[start:stop]:
        if byte == query[state]:
            state += 1
            if state == length:
                state = 0
        else:
            state = 0
    return state


def _naive_matches(data: bytes, query: bytes, start: int, end: int) -> Iterator[int]:
    """Yield the index of the last byte of each match in data[start:end + 1].

    The matcher never backtracks: on a mismatch it drops back to the start of
    the pattern without looking at the mismatching byte again, so some
    overlapping occurrences are not reported.
    """
    length = len(query)
    if length == 0 or end < start:
        return
    limit = end + 1
    members = frozenset(query)
    known_pos, known_state = start, 0
    candidate = data.find(query, start, limit)
    while candidate != -1:
        back = candidate - 1
        while back >= known_pos and data[back] in members:
            back -= 1
        if back >= known_pos:
            sim_start, sim_state = back + 1, 0
        else:
            sim_start, sim_state = known_pos, known_state
        state = _advance(data, query, sim_start, candidate, sim_state)
        if state == 0:
            yield candidate + length - 1
            known_pos, known_state = candidate + length, 0
            candidate = data.find(query, candidate + length, limit)
        else:
            known_pos, known_state = candidate, state
            candidate = data.find(query, candidate + 1, limit)


def _decompress_frames(raw: bytes, pos: int) -> tuple[bytes, int]:
    """Decompress consecutive zstd frames starting at ``pos``.

    Returns the decompressed data and the number of compressed bytes used.
    Decoding stops at the first data that is not a zstd frame.
    """
    out = bytearray()
    view = memoryview(raw)
    cursor = pos
    while raw[cursor:cursor + 4] == ZSTD_MAGIC:
        remaining = len(raw) - cursor
        decoder = zstandard.ZstdDecompressor().decompressobj()
        try:
            out += decoder.decompress(view[cursor:])
        except zstandard.ZstdError as exc:
            raise DissectError(f"zstd: {exc}") from exc
        if not decoder.eof:
            raise DissectError("zstd: unexpected end of frame")
        cursor += remaining - len(decoder.unused_data)
    if not out and cursor < len(raw):
        raise DissectError("zstd: magic number mismatch")
    return bytes(out), cursor - pos


class Reader:
    """Decompresses a replay, reads its header and dispatches its packets."""

    def __init__(self, stream: BinaryIO | bytes) -> None:
        raw = bytes(stream.read() if hasattr(stream, "read") else stream)
        self._data: bytes = b""
        self.offset = 0
        self._queries: list[bytes] = []
        self._listeners: list[list[Listener]] = []
        self._partial = False
        self.time = 0.0
        self.time_raw = ""
        self.last_defuser_player_index = 0
        self.planted = False
        self.players_read = 0
        self.last_killer_from_scoreboard = ""
        self.header = Header()
        self.match_feedback: list[MatchUpdate] = []
        self.scoreboard = Scoreboard()

        chunked = detect_chunked_compression(raw)
        log.debug("chunkedCompression (>=Y8S4)=%s", chunked)
        if chunked:
            self._load_chunked(raw)
        else:
            self._load_plain(raw)
        log.debug("size=%d", len(self._data))
        log.debug("season=%s code=%d", self.header.game_version, self.header.code_version)

        self.listen(b"\x22\x07\x94\x9b\xdc", read_player)
        self.listen(b"\x22\xa9\x26\x0b\xe4", read_atk_op_swap)
        self.listen(b"\xaf\x98\x99\xca", read_spawn)
        if self.header.code_version >= Y8S1:
            self.listen(b"\x1f\x07\xef\xc9", read_time)
        else:
            self.listen(b"\x1e\xf1\x11\xab", read_y7_time)
        self.listen(b"\x59\x34\xe5\x8b\x04", read_match_feedback)
        self.listen(b"\x22\xa9\xc8\x58\xd9", read_defuser_timer)
        self.listen(b"\xec\xda\x4f\x80", read_scoreboard_score)
        self.listen(b"\x4d\x73\x7f\x9e", read_scoreboard_assists)
        self.listen(b"\x1c\xd2\xb1\x9d", read_scoreboard_kills)

    def _load_plain(self, raw: bytes) -> None:
        self._data, _ = _decompress_frames(raw, 0)
        read_header_magic(self)
        self.header = read_header(self)

    def _load_chunked(self, raw: bytes) -> None:
        self._data = raw
        read_header_magic(self)
        self.header = read_header(self)
        out = bytearray()
        sections = 0
        while True:
            found = next(
                _naive_matches(raw, ZSTD_MAGIC, self.offset, len(raw) - 2), None
            )
            if found is None:
                break
            sections += 1
            frame_start = found - len(ZSTD_MAGIC) + 1
            chunk, consumed = _decompress_frames(raw, frame_start)
            out += chunk
            self.offset = frame_start + consumed
        self._data = bytes(out)
        self.offset = 0
        log.debug("zstd_sections=%d", sections)

    def listen(self, pattern: bytes, callback: Listener) -> None:
        """Register ``callback`` to run during :meth:`read` wherever ``pattern`` occurs."""
        pattern = bytes(pattern)
        if not pattern:
            raise ValueError("empty pattern")
        for query, listeners in zip(self._queries, self._listeners):
            if query == pattern:
                listeners.append(callback)
                break
        self._queries.append(pattern)
        self._listeners.append([callback])

    def read(self) -> None:
        """Read the replay past the header to the end, running the listeners."""
        data = self._data
        start = self.offset
        end = len(data)
        if self._partial:
            end //= 3
        block = (end - start) // _SCAN_BLOCKS
        log.debug("blocks=%d blockSize=%d", _SCAN_BLOCKS, block)
        found: list[tuple[int, int]] = []
        for i in range(_SCAN_BLOCKS):
            block_start = start + i * block
            block_end = block_start + block
            if i > 0:
                block_start += 1
            if i == _SCAN_BLOCKS - 1:
                block_end = end - 1
            block_end = min(block_end, len(data) - 1)
            for j, query in enumerate(self._queries):
                found.extend(
                    (m, j) for m in _naive_matches(data, query, block_start, block_end)
                )
        found.sort()
        log.debug("matches=%d, calling listeners", len(found))
        for position, index in found:
            for listener in self._listeners[index]:
                self.offset = position + 1
                listener(self)
        if not self._partial:
            round_end(self)
        self._data = b""

    def read_partial(self) -> None:
        """Read only up to the player list, skipping dynamic round data."""
        self._partial = True
        log.debug("using partial read")
        try:
            self.read()
        finally:
            self._partial = False

    def seek(self, pattern: bytes) -> None:
        """Move past the next occurrence of ``pattern``; raise EndOfData if none."""
        pattern = bytes(pattern)
        if not pattern:
            raise ValueError("empty pattern")
        start = self.offset
        found = next(
            _naive_matches(self._data, pattern, self.offset, len(self._data) - 2), None
        )
        if found is None:
            self.offset = max(self.offset + 1, len(self._data))
            log.warning("large seek bytes=%d", self.offset - start)
            raise EndOfData()
        self.offset = found + 1

    def skip(self, n: int) -> None:
        """Advance by ``n`` bytes; raise EndOfData at or past the end."""
        self.offset += n
        if self.offset >= len(self._data):
            raise EndOfData()

    def read_bytes(self, n: int) -> bytes:
        self.skip(n)
        return self._data[self.offset - n:self.offset]

    def read_int(self) -> int:
        return self.read_bytes(1)[0]

    def read_string(self) -> str:
        size = self.read_int()
        return self.read_bytes(size).decode("utf-8", errors="replace")

    def read_uint32(self) -> int:
        self.skip(1)  # size byte; the length is already known
        return int.from_bytes(self.read_bytes(4), "little")

    def read_uint64(self) -> int:
        self.skip(1)  # size byte; the length is already known
        return int.from_bytes(self.read_bytes(8), "little")

    def write(self, stream: BinaryIO) -> int:
        """Write the decompressed replay data to ``stream``."""
        return stream.write(self._data)

    def player_index_by_id(self, player_id: bytes) -> int:
        player_id = bytes(player_id)
        for i, player in enumerate(self.header.players):
            if player.dissect_id == player_id:
                return i
        if player_id != b"\x00\x00\x00\x00":
            log.debug("could not index player by id %s", player_id.hex())
        return -1

    def player_index_by_username(self, username: str) -> int:
        for i, player in enumerate(self.header.players):
            if player.username == username:
                return i
        log.debug("could not index player by username %s", username)
        return -1

    def head(self) -> None:
        """Log a summary of the replay header."""
        header = self.header
        username = "N/A"
        for player in header.players:
            if player.profile_id == header.recording_profile_id:
                username = player.username
        log.info("Version:          %s/%d", header.game_version, header.code_version)
        log.info("Recording Player: %s [%s]", username, header.recording_profile_id)
        log.info("Match ID:         %s", header.match_id)
        log.info("Timestamp:        %s", header.timestamp.astimezone())
        log.info("Match Type:       %s", header.match_type.name)
        log.info("Game Mode:        %s", header.game_mode.name)
        log.info("Map:              %s", header.map.name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "header": self.header.to_dict(),
            "matchFeedback": [update.to_dict() for update in self.match_feedback],
            "Scoreboard": {
                "Players": [
                    {
                        "ID": base64.b64encode(p.id).decode("ascii"),
                        "Score": p.score,
                        "Assists": p.assists,
                        "AssistsFromRound": p.assists_from_round,
                    }
                    for p in self.scoreboard.players
                ]
            },
        }


@dataclass
class HexEventComparison:
    """Debugging aid that lines up raw packets from several players."""

    usernames: list[str] = field(default_factory=list)
    rows: list[bytes] = field(default_factory=list)

    def push(self, username: str, data: bytes) -> None:
        self.usernames.append(username)
        self.rows.append(bytes(data))

    def flush(self) -> str:
        """Log every row and return the common hex, with differing bytes as 00."""
        if not self.rows:
            raise ValueError("nothing to compare")
        first = self.rows[0]
        width = len(first)
        unique = False
        common = []
        for i in range(width):
            for row in self.rows:
                if len(row) >= width and first[i] != row[i]:
                    unique = True
                else:
                    unique = False
            common.append("00" if unique else f"{first[i]:02X}")
        for username, row in zip(self.usernames, self.rows):
            log.debug("username=%16s value=%s", username, row.hex().upper())
        result = "".join(common)
        log.debug("username=%16s value=%s", "common", result)
        return result