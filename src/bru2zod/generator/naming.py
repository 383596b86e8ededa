"""Identifier casing and URL-derived names for generated schemas."""

import re

WORD_START_RE = re.compile(r"(?:^\w|[A-Z]|\b\w)", re.ASCII)
TEMPLATE_VAR_RE = re.compile(r"\{\{[^}]+\}\}")
ORIGIN_RE = re.compile(r"^https?://[^/]*")
QUERY_RE = re.compile(r"[?#].*$")


def to_pascal_case(value: str) -> str:
    """`get posts` -> `GetPosts`, `content-type` -> `ContentType`."""
    value = WORD_START_RE.sub(lambda m: m.group(0).upper(), value)
    value = re.sub(r"\s+", "", value)
    return re.sub(r"[^a-zA-Z0-9]", "", value)


def to_camel_case(value: str) -> str:
    pascal = to_pascal_case(value)
    return pascal[:1].lower() + pascal[1:]


def schema_name(type_name: str) -> str:
    """Name of the Zod schema constant backing a type alias."""
    return f"{to_camel_case(type_name)}Schema"


def url_to_path_name(url: str) -> str:
    """Derive an identifier from the path of a request URL.

    `{{host}}/users/:id/posts?page=1` -> `UsersIdPosts`. Returns an empty
    string when the URL has no path segments.
    """
    cleaned = TEMPLATE_VAR_RE.sub("", url)
    cleaned = ORIGIN_RE.sub("", cleaned)
    cleaned = QUERY_RE.sub("", cleaned)
    cleaned = cleaned.strip("/")
    if not cleaned:
        return ""

    segments = []
    for segment in cleaned.split("/"):
        if not segment:
            continue
        segment = re.sub(r"^:", "", segment)
        segment = re.sub(r"^\{|\}$", "", segment)
        segments.append(to_pascal_case(segment))
    return "".join(segments)
