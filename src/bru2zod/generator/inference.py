"""Sample-based JSON Schema inference.

Produces the draft schema the synthesizer restructures: every object shape
is lifted into `definitions` (named after the property it was found under,
the root under the requested name) and referenced with `$ref`, arrays carry
one merged `items` schema, and properties present in every sample are
listed as `required`.
"""

import json
import re
from typing import Any

from bru2zod.generator.naming import to_pascal_case

DRAFT_URI = "http://json-schema.org/draft-06/schema#"

FORMAT_PATTERNS = (
    ("date-time", re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})?$")),
    ("date", re.compile(r"^\d{4}-\d{2}-\d{2}$")),
    ("email", re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")),
    ("uuid", re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)),
    ("uri", re.compile(r"^(https?|ftp)://\S+$")),
)


class SampleSchemaInferencer:
    """Default inferencer: `infer(name, samples) -> draft schema`."""

    def infer(self, name: str, samples: list[str]) -> dict:
        values = [json.loads(sample) for sample in samples]
        schema = merge_schemas([infer_value(v) for v in values])

        definitions: dict[str, dict] = {}
        root = _lift(schema, to_pascal_case(name) or "Root", definitions)

        draft: dict[str, Any] = {"$schema": DRAFT_URI}
        draft.update(root)
        draft["definitions"] = definitions
        return draft


def infer_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    return "string"


def detect_format(value: str) -> str | None:
    for name, pattern in FORMAT_PATTERNS:
        if pattern.match(value):
            return name
    return None


def infer_value(value: Any) -> dict:
    """Schema for a single JSON value, nested shapes kept inline."""
    value_type = infer_type(value)

    if value_type == "object":
        return {
            "type": "object",
            "properties": {k: infer_value(v) for k, v in value.items()},
            "required": list(value.keys()),
        }
    if value_type == "array":
        if not value:
            return {"type": "array", "items": {}}
        return {"type": "array", "items": merge_schemas([infer_value(v) for v in value])}
    if value_type == "string":
        fmt = detect_format(value)
        return {"type": "string", "format": fmt} if fmt else {"type": "string"}
    return {"type": value_type}


def merge_schemas(schemas: list[dict]) -> dict:
    """Merge per-sample schemas into one schema describing all of them."""
    if not schemas:
        return {}
    if len(schemas) == 1:
        return schemas[0]

    flat: list[dict] = []
    for schema in schemas:
        if "anyOf" in schema:
            flat.extend(schema["anyOf"])
        elif isinstance(schema.get("type"), list):
            flat.extend(dict(schema, type=t) for t in schema["type"])
        else:
            flat.append(schema)

    by_type: dict[str, list[dict]] = {}
    has_null = False
    for schema in flat:
        if not schema:
            continue
        if schema.get("type") == "null":
            has_null = True
            continue
        by_type.setdefault(schema["type"], []).append(schema)

    # 1 and 1.5 in the same position are both numbers
    if set(by_type) == {"integer", "number"}:
        by_type = {"number": [{"type": "number"}]}

    if not by_type:
        return {"type": "null"} if has_null else {}

    merged = [_merge_same_type(t, group) for t, group in by_type.items()]
    if len(merged) > 1:
        if has_null:
            merged.append({"type": "null"})
        return {"anyOf": merged}

    result = merged[0]
    if has_null:
        if result["type"] in ("object", "array"):
            return {"anyOf": [result, {"type": "null"}]}
        result = dict(result, type=[result["type"], "null"])
    return result


def _merge_same_type(schema_type: str, schemas: list[dict]) -> dict:
    if schema_type == "object":
        properties: dict[str, list[dict]] = {}
        for schema in schemas:
            for key, prop in schema["properties"].items():
                properties.setdefault(key, []).append(prop)
        required = [
            key for key in properties
            if all(key in schema.get("required", []) for schema in schemas)
        ]
        return {
            "type": "object",
            "properties": {k: merge_schemas(v) for k, v in properties.items()},
            "required": required,
        }

    if schema_type == "array":
        items = [s["items"] for s in schemas if s.get("items")]
        return {"type": "array", "items": merge_schemas(items)}

    if schema_type == "string":
        formats = {s.get("format") for s in schemas}
        if len(formats) == 1 and None not in formats:
            return {"type": "string", "format": formats.pop()}
        return {"type": "string"}

    return {"type": schema_type}


def _lift(schema: dict, name: str, definitions: dict[str, dict]) -> dict:
    """Move object shapes into `definitions`, returning the replacement node."""
    if "anyOf" in schema:
        return {"anyOf": [_lift(s, name, definitions) for s in schema["anyOf"]]}

    if schema.get("type") == "array":
        return {"type": "array", "items": _lift(schema["items"], name, definitions)}

    if schema.get("type") != "object":
        return schema

    node = {
        "type": "object",
        "additionalProperties": False,
        "properties": {
            key: _lift(prop, to_pascal_case(key) or "Property", definitions)
            for key, prop in schema["properties"].items()
        },
        "required": schema["required"],
        "title": name,
    }
    return {"$ref": f"#/definitions/{_register(node, name, definitions)}"}


def _register(node: dict, name: str, definitions: dict[str, dict]) -> str:
    """Store `node` under `name`; equal shapes share one definition."""
    candidate = name
    suffix = 1
    while candidate in definitions:
        existing = definitions[candidate]
        if _same_shape(existing, node):
            return candidate
        suffix += 1
        candidate = f"{name}{suffix}"
    definitions[candidate] = dict(node, title=candidate)
    return candidate


def _same_shape(a: dict, b: dict) -> bool:
    return {k: v for k, v in a.items() if k != "title"} == {k: v for k, v in b.items() if k != "title"}
