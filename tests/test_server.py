import io
from unittest.mock import patch

import pytest
import zstandard

from r6dissect.errors import InvalidFileError
from r6dissect.server import create_app, main, parse_replay_file

PROPS = [
    ("version", "Y9S2"),
    ("code", "8303162"),
    ("datetime", "2024-05-01-12-30-00"),
    ("matchtype", "2"),
    ("worldid", "837214085"),
    ("recordingplayerid", "0"),
    ("gamemodeid", "327933806"),
    ("roundspermatch", "9"),
    ("roundspermatchovertime", "2"),
    ("roundnumber", "0"),
    ("overtimeroundnumber", "0"),
    ("teamname0", "BLUE"),
    ("teamname1", "ORANGE"),
    ("id", "match-1"),
    ("teamscore0", "0"),
    ("teamscore1", "0"),
]


def _header_string(text):
    raw = text.encode()
    return bytes([len(raw)]) + b"\x00" * 7 + raw


def _replay():
    body = b"dissect" + b"\x01" + b"\x00" * 14
    body += b"".join(_header_string(k) + _header_string(v) for k, v in PROPS)
    body += b"\x00" * 32
    return zstandard.ZstdCompressor().compress(body)


@pytest.fixture
def client():
    return create_app().test_client()


def test_parse_replay_file(tmp_path):
    path = tmp_path / "match.rec"
    path.write_bytes(_replay())
    reader = parse_replay_file(str(path))
    assert reader.header.match_id == "match-1"
    assert reader.header.game_version == "Y9S2"
    assert reader.header.code_version == 8303162


def test_parse_replay_file_invalid(tmp_path):
    path = tmp_path / "bad.rec"
    path.write_bytes(b"notareplay")
    with pytest.raises(InvalidFileError):
        parse_replay_file(str(path))


def test_upload_without_file(client):
    response = client.post("/upload", data={})
    assert response.status_code == 400
    assert response.data == b"File upload error\n"


def test_upload_invalid_replay(client, tmp_path):
    with patch("tempfile.gettempdir", return_value=str(tmp_path)):
        response = client.post(
            "/upload",
            data={"file": (io.BytesIO(b"notareplay"), "bad.rec")},
            content_type="multipart/form-data",
        )
    assert response.status_code == 500
    assert response.data.decode() == "Error parsing replay: dissect: not a dissect file\n"


def test_upload_valid_replay(client, tmp_path):
    with patch("tempfile.gettempdir", return_value=str(tmp_path)):
        response = client.post(
            "/upload",
            data={"file": (io.BytesIO(_replay()), "match.rec")},
            content_type="multipart/form-data",
        )
    assert response.status_code == 200
    assert response.mimetype == "application/json"
    header = response.get_json()["header"]
    assert header["matchID"] == "match-1"
    assert header["map"] == {"name": "ClubHouse", "id": 837214085}
    assert [t["name"] for t in header["teams"]] == ["BLUE", "ORANGE"]
    assert (tmp_path / "match.rec").read_bytes() == _replay()


def test_main_runs_app(capsys):
    with patch("flask.Flask.run") as run:
        main(["--port", "9000"])
    run.assert_called_once_with(host="0.0.0.0", port=9000)
    assert capsys.readouterr().out == "Server running on :9000\n"