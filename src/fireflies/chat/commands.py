# Command routing — turn a submitted chat message into exactly one Command.
# Created: 2026-10-04
#
# Prefixes are checked in a fixed order through _DISPATCH; the first token of
# the message decides, case-insensitively. Anything unmatched is plain chat.

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from fireflies.chat import prompts
from fireflies.errors import ErrorKind

_URL_RE = re.compile(r"https?://\S+", re.IGNORECASE)


@dataclass(frozen=True)
class Search:
    query: str


@dataclass(frozen=True)
class Scrape:
    question: str
    url: str


@dataclass(frozen=True)
class Calculate:
    expression: str


@dataclass(frozen=True)
class ClearContext:
    pass


@dataclass(frozen=True)
class PlainChat:
    text: str
    image: bytes | str | None = None


@dataclass(frozen=True)
class UsageHint:
    """A recognized command with a missing or malformed payload."""

    command: str
    message: str
    kind: ErrorKind = ErrorKind.MALFORMED_COMMAND


Command = Search | Scrape | Calculate | ClearContext | PlainChat | UsageHint


def _parse_clear(payload: str) -> Command | None:
    # Only the bare token clears; "/clear something" is ordinary chat.
    return ClearContext() if not payload else None


def _parse_search(payload: str) -> Command:
    if not payload:
        return UsageHint("cari", prompts.SEARCH_USAGE)
    return Search(query=payload)


def _parse_web(payload: str) -> Command:
    match = _URL_RE.search(payload)
    if match is None:
        return UsageHint("web", prompts.WEB_URL_USAGE)
    url = match.group(0)
    question = (payload[: match.start()] + payload[match.end() :]).strip()
    question = re.sub(r"\s+", " ", question)
    if not question:
        return UsageHint("web", prompts.WEB_QUESTION_USAGE)
    return Scrape(question=question, url=url)


def _parse_calculate(payload: str) -> Command:
    if not payload:
        return UsageHint("kalkulator", prompts.CALCULATOR_USAGE)
    return Calculate(expression=payload)


# Priority order matters: /clear, /cari, /web, /kalkulator.
_DISPATCH: tuple[tuple[str, Callable[[str], Command | None]], ...] = (
    ("/clear", _parse_clear),
    ("/cari", _parse_search),
    ("/web", _parse_web),
    ("/kalkulator", _parse_calculate),
)

COMMAND_NAMES = tuple(prefix for prefix, _ in _DISPATCH)


def route(message: str, image: bytes | str | None = None) -> Command:
    """Resolve *message* (and an optional attached image) to a Command."""
    parts = message.strip().split(None, 1)
    token = parts[0].lower() if parts else ""
    payload = parts[1].strip() if len(parts) > 1 else ""

    for prefix, parse in _DISPATCH:
        if token == prefix:
            command = parse(payload)
            if command is not None:
                return command
            break

    return PlainChat(text=message, image=image)
