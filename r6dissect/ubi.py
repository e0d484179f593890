"""Operator side metadata taken from the publisher's operator listing page."""

from __future__ import annotations

import json
import re
import urllib.request
from dataclasses import dataclass
from html import unescape
from html.parser import HTMLParser
from typing import Any

OPERATORS_URL = "https://www.ubisoft.com/de-de/game/rainbow-six/siege/game-info/operators"
USER_AGENT = "r6dissect"

_PRELOADED_STATE = re.compile(r"window\.__PRELOADED_STATE__\s=\s(.+);\Z", re.DOTALL)


@dataclass(frozen=True)
class UbiOperator:
    """An operator as listed on the operator page."""

    slug: str = ""
    is_attacker: bool = False


def get_operator_map() -> dict[str, UbiOperator]:
    """Download the operator page and map operator slugs to their metadata."""
    request = urllib.request.Request(
        OPERATORS_URL, headers={"User-Agent": USER_AGENT, "Accept": "text/html"}
    )
    with urllib.request.urlopen(request) as response:
        body = response.read()
    operators = parse_operator_html(body.decode("utf-8", errors="replace"))
    return {op.slug: op for op in operators}


class _Tokens(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=False)
        self.events: list[tuple[str, str]] = []

    def _text(self, data: str) -> None:
        if self.events and self.events[-1][0] == "text":
            self.events[-1] = ("text", self.events[-1][1] + data)
        else:
            self.events.append(("text", data))

    def handle_starttag(self, tag, attrs):
        self.events.append(("start", tag))

    def handle_startendtag(self, tag, attrs):
        self.events.append(("selfclose", tag))

    def handle_endtag(self, tag):
        self.events.append(("end", tag))

    def handle_data(self, data):
        self._text(data)

    def handle_entityref(self, name):
        self._text(f"&{name};")

    def handle_charref(self, name):
        self._text(f"&#{name};")


def parse_operator_html(text: str) -> list[UbiOperator]:
    """Find the first script in the page and read the operator list from it."""
    tokens = _Tokens()
    tokens.feed(text)
    tokens.close()
    in_script = False
    for kind, data in tokens.events:
        if not in_script and kind == "start" and data == "script":
            in_script = True
        elif in_script and kind == "text":
            return parse_operator_js(unescape(data))
        elif in_script and kind == "end":
            raise ValueError("error: script tag ended without content")
    raise ValueError("error: no script tag found in HTML")


def _field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise ValueError(f"expected a JSON object for {name!r}")
    if name in obj:
        return obj[name]
    lowered = name.lower()
    for key, value in obj.items():
        if key.lower() == lowered:
            return value
    return None


def _operator(item: Any) -> UbiOperator:
    slug = _field(item, "slug")
    side = _field(item, "side")
    if slug is not None and not isinstance(slug, str):
        raise ValueError("operator slug is not a string")
    if side is not None and not isinstance(side, bool):
        raise ValueError("operator side is not a boolean")
    return UbiOperator(slug=slug or "", is_attacker=bool(side))


def parse_operator_js(js: str) -> list[UbiOperator]:
    """Extract the preloaded state object from script code and list its operators."""
    match = _PRELOADED_STATE.match(js)
    if match is None:
        raise ValueError("error: regex did not match anything")
    data = json.loads(match.group(1))
    container = _field(_field(data, "ContentfulGraphQL"), "OperatorsListContainer")
    content = _field(container, "content")
    if content is None:
        return []
    if not isinstance(content, list):
        raise ValueError("operator content is not a list")
    return [_operator(item) for item in content if item is not None]