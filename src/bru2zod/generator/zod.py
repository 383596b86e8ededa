"""JSON Schema -> Zod source renderer.

Renders one schema node as an exported Zod constant. Expressions are kept
on a single line; nested objects normally arrive already lifted into their
own declarations, so lines stay short.
"""

import json

from pydantic import BaseModel

ZOD_IMPORT = 'import { z } from "zod"'

STRING_FORMATS = {
    "date-time": ".datetime()",
    "date": ".date()",
    "email": ".email()",
    "uri": ".url()",
    "uuid": ".uuid()",
}


class RenderError(Exception):
    """Raised when a schema node cannot be expressed in Zod."""


class RenderOptions(BaseModel):
    module: str = "esm"  # esm / none
    export_type: bool = False


class ZodRenderer:
    """Default renderer: `render(schema, name, options) -> source text`."""

    def render(self, schema: dict, name: str, options: RenderOptions | None = None) -> str:
        options = options or RenderOptions()
        expr = self.expression(schema)

        lines = []
        if options.module == "esm":
            lines.append(ZOD_IMPORT)
            lines.append("")
        lines.append(f"export const {name} = {expr}")
        if options.export_type:
            type_name = name[:1].upper() + name[1:]
            lines.append(f"export type {type_name} = z.infer<typeof {name}>")
        return "\n".join(lines) + "\n"

    def expression(self, schema) -> str:
        if schema is True or schema == {}:
            return "z.any()"
        if schema is False:
            return "z.never()"
        if not isinstance(schema, dict):
            raise RenderError(f"Unsupported schema node: {schema!r}")

        if "const" in schema:
            return f"z.literal({json.dumps(schema['const'])})"
        if "enum" in schema:
            return self._enum(schema["enum"])
        if "anyOf" in schema or "oneOf" in schema:
            return self._union([self.expression(s) for s in schema.get("anyOf", schema.get("oneOf"))])

        schema_type = schema.get("type")
        if isinstance(schema_type, list):
            return self._union([self.expression(dict(schema, type=t)) for t in schema_type])

        if schema_type == "object":
            return self._object(schema)
        if schema_type == "array":
            return f"z.array({self.expression(schema.get('items', {}))})"
        if schema_type == "string":
            return "z.string()" + STRING_FORMATS.get(schema.get("format"), "")
        if schema_type == "integer":
            return "z.number().int()"
        if schema_type == "number":
            return "z.number()"
        if schema_type == "boolean":
            return "z.boolean()"
        if schema_type == "null":
            return "z.null()"

        # Unresolved $ref, untyped or unknown nodes
        return "z.any()"

    def _object(self, schema: dict) -> str:
        properties = schema.get("properties") or {}
        additional = schema.get("additionalProperties", True)

        if not properties and isinstance(additional, dict):
            return f"z.record({self.expression(additional)})"

        required = set(schema.get("required", []))
        fields = []
        for key, prop in properties.items():
            expr = self.expression(prop)
            if key not in required:
                expr += ".optional()"
            fields.append(f"{json.dumps(key)}: {expr}")

        body = "z.object({ " + ", ".join(fields) + " })" if fields else "z.object({})"
        if additional is False:
            body += ".strict()"
        elif isinstance(additional, dict):
            body += f".catchall({self.expression(additional)})"
        return body

    def _enum(self, values: list) -> str:
        if values and all(isinstance(v, str) for v in values):
            return f"z.enum([{', '.join(json.dumps(v) for v in values)}])"
        return self._union([f"z.literal({json.dumps(v)})" for v in values])

    def _union(self, members: list[str]) -> str:
        if not members:
            return "z.never()"
        if len(members) == 1:
            return members[0]
        return f"z.union([{', '.join(members)}])"
