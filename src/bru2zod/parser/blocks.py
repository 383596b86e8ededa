"""Brace-delimited block scanning for the `.bru` text format.

There is no grammar here: a block is located by its header and closed by a
plain `{`/`}` depth counter. Braces inside strings or comments are counted
like any other. Every function returns None (or skips) on malformed input
instead of raising.
"""

import re
from typing import Iterator

NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
INTEGER_RE = re.compile(r"^[+-]?\d+$")


def _header_re(name: str) -> re.Pattern:
    return re.compile(rf"(?<![\w-]){re.escape(name)}\s*:?\s*\{{")


def _find_block(content: str, name: str, start: int = 0) -> tuple[int, int, int] | None:
    """Locate a block at or after `start`.

    Returns (header_start, open_brace, close_brace) or None.
    """
    match = _header_re(name).search(content, start)
    if not match:
        return None

    open_brace = match.end() - 1
    depth = 1
    i = open_brace + 1
    while i < len(content) and depth > 0:
        if content[i] == "{":
            depth += 1
        elif content[i] == "}":
            depth -= 1
        i += 1

    if depth != 0:
        return None
    return match.start(), open_brace, i - 1


def extract_block(content: str, name: str) -> str | None:
    """Return the text between the braces of the first `name { ... }` block."""
    found = _find_block(content, name)
    if found is None:
        return None
    _, open_brace, close_brace = found
    return content[open_brace + 1:close_brace]


def iter_blocks(content: str, name: str) -> Iterator[str]:
    """Yield the body of every `name` block, in document order.

    Each scan resumes after the block just consumed, so nested or repeated
    content is never matched twice.
    """
    pos = 0
    while True:
        found = _find_block(content, name, pos)
        if found is None:
            return
        _, open_brace, close_brace = found
        yield content[open_brace + 1:close_brace]
        pos = close_brace + 1


def strip_blocks(content: str, name: str) -> str:
    """Remove every balanced `name` block, header included."""
    parts = []
    pos = 0
    while True:
        found = _find_block(content, name, pos)
        if found is None:
            break
        start, _, close_brace = found
        parts.append(content[pos:start])
        pos = close_brace + 1
    parts.append(content[pos:])
    return "".join(parts)


def _coerce(value: str):
    if value == "true":
        return True
    if value == "false":
        return False
    if NUMBER_RE.match(value):
        return int(value) if INTEGER_RE.match(value) else float(value)
    return value


def parse_kv(block: str) -> dict | None:
    """Parse `key: value` lines into a dict.

    Blank lines and lines starting with `//` or `#` are skipped. Returns None
    when the block holds no usable line.
    """
    result = {}
    for line in block.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(("//", "#")):
            continue
        key, sep, value = stripped.partition(":")
        if not sep:
            continue
        result[key.strip()] = _coerce(value.strip())
    return result or None
