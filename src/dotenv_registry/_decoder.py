"""Decoder for the dotenv text format.

Supported syntax::

    # full-line comment
    KEY=value               # inline comment, stripped from unquoted values
    KEY: value              # ':' is accepted when the line has no '='
    KEY='literal \\n'       # single quotes: only \\' is an escape
    KEY="line\\nbreak"      # double quotes: \\n, \\r and \\<char> escapes
    KEY="spans
    several lines"
    export NAME=value       # sets os.environ["NAME"], not returned

Keys are upper-cased. When a key appears more than once, the last one wins.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from ._types import DecodeError

logger = logging.getLogger(__name__)

UTF8_BOM = "\ufeff"
EXPORT_PREFIX = "export "

_QUOTES = ("'", '"')
_DOUBLE_QUOTE_ESCAPE = re.compile(r"\\(.)", re.DOTALL)
_DOUBLE_QUOTE_ESCAPES = {"n": "\n", "r": "\r"}


@runtime_checkable
class Decoder(Protocol):
    """Turns the raw content of a config file into a flat key/value mapping."""

    def decode(self, data: bytes | str) -> dict[str, str]:
        ...


@dataclass
class _QuotedBlock:
    """A quoted value still waiting for its closing quote."""

    key: str
    quote: str
    start_line: int
    parts: list[str]


def _find_closing_quote(text: str, quote: str, start: int = 0) -> int:
    """Return the index of the first unescaped *quote* at or after *start*, or -1."""
    pos = start
    while pos < len(text):
        char = text[pos]
        if char == "\\":
            pos += 2
            continue
        if char == quote:
            return pos
        pos += 1
    return -1


def _unescape(body: str, quote: str) -> str:
    if quote == "'":
        return body.replace("\\'", "'")
    return _DOUBLE_QUOTE_ESCAPE.sub(
        lambda m: _DOUBLE_QUOTE_ESCAPES.get(m.group(1), m.group(1)), body
    )


def _strip_inline_comment(value: str) -> str:
    """Cut an unquoted value at its first unescaped ``#`` and unescape ``\\#``."""
    out: list[str] = []
    pos = 0
    while pos < len(value):
        char = value[pos]
        if char == "\\" and value[pos + 1 : pos + 2] == "#":
            out.append("#")
            pos += 2
            continue
        if char == "#":
            break
        out.append(char)
        pos += 1
    return "".join(out)


class DotEnvDecoder:
    """Default decoder for dotenv documents.

    ``decode`` is pure apart from the ``export`` side effect on
    ``os.environ``. Concurrent decodes that export the same names race on the
    process environment; that is not synchronised here.
    """

    def decode(self, data: bytes | str) -> dict[str, str]:
        if isinstance(data, (bytes, bytearray)):
            try:
                text = data.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise DecodeError("invalid UTF-8", data[: exc.start].count(b"\n") + 1) from exc
        else:
            text = data
        if text.startswith(UTF8_BOM):
            text = text[len(UTF8_BOM) :]

        result: dict[str, str] = {}
        block: _QuotedBlock | None = None

        for line_no, raw_line in enumerate(text.replace("\r\n", "\n").split("\n"), start=1):
            if block is not None:
                end = _find_closing_quote(raw_line, block.quote)
                if end < 0:
                    block.parts.append(raw_line)
                    continue
                block.parts.append(raw_line[:end])
                value = _unescape("\n".join(block.parts), block.quote)
                value += self._read_tail(raw_line, end + 1)
                self._emit(result, block.key, value)
                block = None
                continue

            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue

            key, sep, rest = line.partition("=")
            if not sep:
                key, sep, rest = line.partition(":")
            if not sep:
                logger.debug("Skipping line %d: no '=' or ':' separator", line_no)
                continue

            key = self._parse_key(key, line_no)
            rest = rest.strip()

            if rest[:1] in _QUOTES:
                quote = rest[0]
                end = _find_closing_quote(rest, quote, 1)
                if end < 0:
                    block = _QuotedBlock(
                        key=key, quote=quote, start_line=line_no, parts=[rest[1:]]
                    )
                    continue
                value = _unescape(rest[1:end], quote) + self._read_tail(rest, end + 1)
            else:
                value = _strip_inline_comment(rest).strip()

            self._emit(result, key, value)

        if block is not None:
            raise DecodeError(
                f"unterminated quoted value for key '{block.key}'", block.start_line
            )
        return result

    @staticmethod
    def _parse_key(key: str, line_no: int) -> str:
        key = key.strip()
        name = key[len(EXPORT_PREFIX) :].strip() if key.startswith(EXPORT_PREFIX) else key
        if not name:
            raise DecodeError("empty key", line_no)
        if any(char.isspace() for char in name):
            raise DecodeError(f"invalid key {key!r}: keys must not contain spaces", line_no)
        return key

    def _read_tail(self, text: str, pos: int) -> str:
        """Read what follows a closing quote.

        Directly adjacent quoted segments are concatenated (``'a'"b"`` is
        ``ab``). A trailing comment or blank is dropped; other trailing text
        is kept as an unquoted segment.
        """
        if text[pos : pos + 1] in _QUOTES:
            quote = text[pos]
            end = _find_closing_quote(text, quote, pos + 1)
            if end >= 0:
                return _unescape(text[pos + 1 : end], quote) + self._read_tail(text, end + 1)
        return _strip_inline_comment(text[pos:]).rstrip()

    @staticmethod
    def _emit(result: dict[str, str], key: str, value: str) -> None:
        if key.startswith(EXPORT_PREFIX):
            name = key[len(EXPORT_PREFIX) :].strip()
            os.environ[name] = value
            logger.debug("Exported %s to the process environment", name)
            return
        result[key.upper()] = value
