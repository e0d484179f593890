"""HTTP service that accepts a replay upload and returns it parsed as JSON."""

from __future__ import annotations

import argparse
import json
import os
import tempfile

from flask import Flask, Response, request

from .errors import is_ok
from .reader import Reader


def parse_replay_file(path: str) -> Reader:
    """Open a replay file, read it through and return the reader."""
    with open(path, "rb") as stream:
        reader = Reader(stream)
    try:
        reader.read()
    except EOFError as exc:
        if not is_ok(exc):
            raise
    return reader


def _error(message: str, status: int) -> Response:
    return Response(message + "\n", status=status, mimetype="text/plain")


def create_app() -> Flask:
    """Build the application with its /upload route."""
    app = Flask(__name__)

    @app.route("/upload", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
    def upload() -> Response:
        sent = request.files.get("file")
        name = os.path.basename(sent.filename or "") if sent is not None else ""
        if not name:
            return _error("File upload error", 400)
        path = os.path.join(tempfile.gettempdir(), name)
        try:
            sent.save(path)
        except OSError:
            return _error("Failed to save file", 500)
        try:
            reader = parse_replay_file(path)
        except Exception as exc:  # any parse failure is reported to the client
            return _error(f"Error parsing replay: {exc}", 500)
        try:
            body = json.dumps(reader.to_dict(), indent=2, ensure_ascii=False)
        except (TypeError, ValueError):
            return _error("Failed to convert to JSON", 500)
        return Response(body, status=200, mimetype="application/json")

    return app


def main(argv=None) -> None:
    """Run the upload server."""
    parser = argparse.ArgumentParser(description="Replay upload server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    args = parser.parse_args(argv)
    print(f"Server running on :{args.port}")
    create_app().run(host=args.host, port=args.port)