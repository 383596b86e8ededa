"""Bruno `.bru` request file parser.

Parses one request document into a BruFile. Example responses are read
first and then removed from the text, so headers and bodies nested inside an
example never leak into the request-level fields.
"""

import re
from pathlib import Path

import json5

from .base import BruFile, ExampleResponse
from .blocks import extract_block, iter_blocks, parse_kv, strip_blocks

METHODS = ("get", "post", "put", "delete", "patch", "options", "head")

METHOD_RE = re.compile(rf"^({'|'.join(METHODS)})\s*\{{", re.MULTILINE)
NAME_RE = re.compile(r"name:\s*(.+)")
URL_RE = re.compile(r"url:\s*(.+)")
STATUS_RE = re.compile(r"code:\s*(\d+)")

# Tried in order: '''...''', "...", then the bare rest of the block.
CONTENT_PATTERNS = (
    re.compile(r"content:\s*'''([\s\S]*?)'''"),
    re.compile(r'content:\s*"([\s\S]*?)"'),
    re.compile(r"content:\s*([\s\S]+)"),
)


def parse_bru_file(file_path: Path) -> BruFile:
    """Read and parse a `.bru` file."""
    text = Path(file_path).read_text(encoding="utf-8")
    return parse_bru(file_path, text)


def parse_bru(file_path: Path | str, text: str) -> BruFile:
    """Parse the text of a `.bru` document."""
    file_path = Path(file_path)

    responses = _parse_examples(text)
    clean = strip_blocks(text, "example")

    return BruFile(
        path=str(file_path),
        name=_parse_name(text, file_path),
        method=_parse_method(text),
        url=_parse_url(text),
        body=_parse_json5(extract_block(clean, "body:json")),
        headers=_parse_kv_block(clean, "headers"),
        query=_parse_kv_block(clean, "params:query"),
        params=_parse_kv_block(clean, "params:path"),
        responses=responses,
    )


def _parse_name(text: str, file_path: Path) -> str:
    meta = extract_block(text, "meta")
    if meta:
        match = NAME_RE.search(meta)
        if match:
            return match.group(1).strip()
    return file_path.stem


def _parse_method(text: str) -> str:
    match = METHOD_RE.search(text)
    return match.group(1).lower() if match else "unknown"


def _parse_url(text: str) -> str:
    match = URL_RE.search(text)
    return match.group(1).strip() if match else ""


def _parse_kv_block(text: str, name: str) -> dict | None:
    block = extract_block(text, name)
    return parse_kv(block) if block is not None else None


def _parse_json5(literal: str | None):
    """Relaxed JSON (comments, trailing commas). Bad input gives None."""
    if literal is None or not literal.strip():
        return None
    try:
        return json5.loads(literal.strip())
    except (ValueError, RecursionError):
        return None


def _parse_examples(text: str) -> list[ExampleResponse]:
    responses: list[ExampleResponse] = []
    seen: set[int] = set()

    for example in iter_blocks(text, "example"):
        response = extract_block(example, "response")
        if response is None:
            continue

        status_code = _parse_status(response)
        if not status_code or status_code in seen:
            continue

        headers_block = extract_block(response, "headers")
        responses.append(
            ExampleResponse(
                status_code=status_code,
                body=_parse_example_body(extract_block(response, "body")),
                headers=parse_kv(headers_block) if headers_block is not None else None,
            )
        )
        seen.add(status_code)

    return responses


def _parse_status(response: str) -> int | None:
    status = extract_block(response, "status")
    if status is None:
        return None
    match = STATUS_RE.search(status)
    return int(match.group(1)) if match else None


def _parse_example_body(body_block: str | None):
    if body_block is None:
        return None
    for pattern in CONTENT_PATTERNS:
        match = pattern.search(body_block)
        if match:
            return _parse_json5(match.group(1))
    return None
