# r6dissect

Read Rainbow Six Siege match replay files (`.rec`) and turn them into
structured data: the match header (map, game mode, teams, players and
operators), the match feedback (kills, deaths, defuser plants and disables,
operator swaps, players leaving), the scoreboard, and per-player round
statistics.

Both replay layouts are handled: a single zstd stream, and the chunked
layout that starts with the `dissect` magic and holds several zstd frames.

## Installation

```
pip install .
```

Tests need the `test` extra (`pip install .[test]`) and run with `pytest`.

## Using the library

```python
from r6dissect.reader import Reader
from r6dissect.stats import player_stats, opening_kill, trades

with open("Match-R01.rec", "rb") as replay:
    reader = Reader(replay)   # decompresses the data and reads the header

reader.read()                 # scans the rest and decides the round winner

print(reader.header.map.name, reader.header.game_mode.name)
for update in reader.match_feedback:
    print(update.time, update.type.name, update.username, update.target)

for stats in player_stats(reader):
    print(stats.username, stats.kills, stats.died, stats.headshot_percentage, stats.one_vx)

print(opening_kill(reader))
print(len(trades(reader)), "trades")
```

`Reader` accepts an open binary file or a `bytes` object. Useful members:

- `Reader.read()` reads to the end of the data, runs the packet listeners and
  sets the winning team and its win condition.
- `Reader.read_partial()` scans only the first third of the data, which is
  enough for the player list; it does not decide the winner.
- `Reader.listen(pattern, callback)` registers an extra callback that runs
  during `read()` wherever the byte pattern occurs.
- `Reader.to_dict()` returns a JSON-ready dictionary with the keys `header`,
  `matchFeedback` and `Scoreboard`.
- `Reader.head()` logs a summary of the header through the `logging` module.
- `Reader.write(stream)` writes the decompressed data (before `read()` clears it).

The data model (`Header`, `Team`, `Player`, `MatchUpdate` and the enumerations
`Operator`, `Map`, `GameMode`, `MatchType`, `MatchUpdateType`, `TeamRole`,
`WinCondition`) lives in `r6dissect.models`; `operator_role(operator)` tells
whether an operator attacks or defends.

`r6dissect.stats` also offers `opening_death`, `kills_and_deaths`,
`num_players`, `headshot_percentage`, and `match_player_stats(rounds)`, which
sums the round statistics of several readers (one per round) into
`PlayerMatchStats` totals.

`r6dissect.ubi.get_operator_map()` downloads the publisher's operator page and
maps operator slugs to whether they attack; `parse_operator_html(text)` does
the same for a page already at hand.

Malformed input raises exceptions from `r6dissect.errors`: `InvalidFileError`
when the data is not a replay, `InvalidStringSeparatorError` for a broken
header string, `EndOfData` (an `EOFError`) when the data runs out, and
`DissectError` as their common base. Bad numbers or dates in the header raise
`ValueError`.

## Running the upload server

```
r6dissect-server --host 0.0.0.0 --port 8080
```

Both options are optional; the defaults are shown. Send a replay file as the
`file` field of a multipart request to `/upload`; the file is saved to the
system temporary directory, parsed, and returned as indented JSON (the
`Reader.to_dict()` form). A missing file gives status 400 with
`File upload error`; a parse failure gives status 500 with
`Error parsing replay: ...`. The upload size is not limited.

To parse a file on disk without the server, call
`r6dissect.server.parse_replay_file(path)`, which returns the `Reader`.

## What it does not do

There is no command-line tool for converting replay files, and no export to
spreadsheets or other file formats; only the JSON from `to_dict()` and the
upload server are provided. Match folders are not read as a whole: combine
rounds yourself by reading each round file and passing the readers to
`match_player_stats`.