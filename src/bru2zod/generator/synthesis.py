"""Schema synthesis: sample value -> Zod declarations + type aliases."""

import json
import re
from typing import Any, Iterable, Protocol

from pydantic import BaseModel

from bru2zod.generator.inference import SampleSchemaInferencer
from bru2zod.generator.naming import schema_name, to_pascal_case
from bru2zod.generator.restructure import (
    build_ref_map,
    mark_references,
    restructure,
    unwrap_root_ref,
)
from bru2zod.generator.zod import RenderOptions, ZodRenderer

IMPORT_RE = re.compile(r"""import \{ z \} from ["']zod["'];?[^\n]*\n""")


class SchemaInferencer(Protocol):
    def infer(self, name: str, samples: list[str]) -> dict: ...


class SchemaRenderer(Protocol):
    def render(self, schema: dict, name: str, options: RenderOptions) -> str: ...


class ComponentResult(BaseModel):
    """Declarations for one component, definitions first, root last."""

    zod_segments: list[str] = []
    type_exports: list[str] = []
    type_names: list[str] = []


def type_export(type_name: str, schema: str) -> str:
    return f"export type {type_name} = z.infer<typeof {schema}>;"


def is_empty(data: Any) -> bool:
    return data is None or (isinstance(data, (dict, list)) and not data)


class SchemaSynthesizer:
    """Turns one sample value into named, cross-referencing Zod schemas."""

    def __init__(
        self,
        inferencer: SchemaInferencer | None = None,
        renderer: SchemaRenderer | None = None,
    ):
        self.inferencer = inferencer or SampleSchemaInferencer()
        self.renderer = renderer or ZodRenderer()
        self.options = RenderOptions(module="esm", export_type=False)

    def synthesize(self, name: str, data: Any, reserved: Iterable[str] = ()) -> ComponentResult:
        """Generate declarations for `data`, rooted at the type `name`.

        Nested objects and arrays become their own declarations, named by
        their access path (`GetPostsBodyPostsItem`). Cross references are
        emitted as `z.literal("__REF__<schema>")` placeholders for the
        assembler to rewrite. Nested declarations never take a name from
        `reserved`.
        """
        if is_empty(data):
            return ComponentResult()

        base_name = to_pascal_case(name)
        draft = self.inferencer.infer(base_name, [json.dumps(data)])
        schema = restructure(unwrap_root_ref(draft), base_name, reserved)

        definitions = schema.pop("definitions")
        ref_map = build_ref_map(definitions)

        type_names = [to_pascal_case(key) for key in definitions] + [base_name]
        schemas = [ref_map[key] for key in definitions] + [schema_name(base_name)]
        type_exports = [type_export(t, s) for t, s in zip(type_names, schemas)]
        root_schema = schemas[-1]

        segments = [
            self._render(mark_references(node, ref_map), ref_map[key])
            for key, node in definitions.items()
        ]
        segments.append(self._render(mark_references(schema, ref_map), root_schema))

        return ComponentResult(zod_segments=segments, type_exports=type_exports, type_names=type_names)

    def _render(self, node: dict, name: str) -> str:
        code = self.renderer.render(node, name, self.options)
        return IMPORT_RE.sub("", code, count=1).strip()
