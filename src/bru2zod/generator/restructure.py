"""Lift anonymous nested shapes into named, path-qualified definitions.

Names follow the access path from the root: the `posts` array under
`GetPostsBody` becomes `GetPostsBodyPosts`, its element
`GetPostsBodyPostsItem`. A shape reached through two different paths gets
two definitions; nothing is shared by structure.
"""

import copy
from typing import Iterable

from bru2zod.generator.naming import schema_name, to_pascal_case

REF_PREFIX = "#/definitions/"
MARKER_PREFIX = "__REF__"


def ref_target(node) -> str | None:
    """Definition key of a local `$ref` node, else None."""
    if isinstance(node, dict) and isinstance(node.get("$ref"), str):
        ref = node["$ref"]
        if ref.startswith(REF_PREFIX):
            return ref[len(REF_PREFIX):]
    return None


def make_ref(name: str) -> dict:
    return {"$ref": f"{REF_PREFIX}{name}"}


def unwrap_root_ref(schema: dict) -> dict:
    """Inline the definition a root-level `$ref` points at."""
    target = ref_target(schema)
    definitions = schema.get("definitions") or {}
    if target is None or target not in definitions:
        return schema

    remaining = {k: v for k, v in definitions.items() if k != target}
    root = {k: v for k, v in schema.items() if k not in ("$ref", "definitions")}
    root.update(copy.deepcopy(definitions[target]))
    root["definitions"] = remaining
    return root


class _Restructurer:
    """Accumulates the definitions produced by one restructuring pass."""

    def __init__(self, source: dict[str, dict], reserved: Iterable[str] = ()):
        self.source = source
        self.definitions: dict[str, dict] = {}
        # names declared outside this pass (the root itself, sibling components)
        self.reserved = set(reserved)
        # source key -> name assigned on the current path (recursive shapes)
        self._expanding: dict[str, str] = {}

    def claim(self, name: str, node: dict) -> str:
        final = name
        suffix = 1
        while final in self.definitions or final in self.reserved:
            suffix += 1
            final = f"{name}{suffix}"
        self.definitions[final] = node
        return final

    def walk(self, node: dict, current: str) -> None:
        properties = node.get("properties")
        if not isinstance(properties, dict):
            return
        for key in list(properties):
            properties[key] = self.lift(properties[key], current + to_pascal_case(key))

    def lift(self, prop, name: str):
        if not isinstance(prop, dict):
            return prop

        if prop.get("type") == "array":
            return self.lift_array(prop, name)

        if prop.get("type") == "object" and "properties" in prop:
            final = self.claim(name, prop)
            self.walk(prop, final)
            return make_ref(final)

        target = ref_target(prop)
        if target is not None and target in self.source:
            if target in self._expanding:
                return make_ref(self._expanding[target])
            return self.clone(target, name)

        return prop

    def clone(self, target: str, name: str) -> dict:
        """Copy a draft definition under `name` and walk the copy."""
        node = copy.deepcopy(self.source[target])
        if node.get("type") == "array":
            return self.lift_array(node, name)

        final = self.claim(name, node)
        self._expanding[target] = final
        try:
            self.walk(node, final)
        finally:
            del self._expanding[target]
        return make_ref(final)

    def lift_array(self, prop: dict, name: str) -> dict:
        items = self.lift_item(prop.get("items") or {}, name + "Item")
        array = {k: v for k, v in prop.items() if k != "items"}
        array["items"] = items
        return make_ref(self.claim(name, array))

    def lift_item(self, items: dict, item_name: str) -> dict:
        if items.get("type") == "array":
            return self.lift_array(items, item_name)

        target = ref_target(items)
        if target is not None and target in self.source:
            if target in self._expanding:
                return make_ref(self._expanding[target])
            return self.clone(target, item_name)

        final = self.claim(item_name, items)
        self.walk(items, final)
        return make_ref(final)

    def adopt_leftovers(self, root: dict) -> None:
        """Carry over draft definitions still referenced but not yet emitted."""
        while True:
            missing = [
                target
                for node in [root, *self.definitions.values()]
                for target in _collect_refs(node)
                if target not in self.definitions and target in self.source
            ]
            if not missing:
                return
            target = missing[0]
            node = copy.deepcopy(self.source[target])
            final = self.claim(target, node)
            if final != target:
                for holder in [root, *self.definitions.values()]:
                    _rename_refs(holder, target, final)
            self.walk(node, final)


def _rename_refs(node, old: str, new: str) -> None:
    if isinstance(node, dict):
        if ref_target(node) == old:
            node["$ref"] = f"{REF_PREFIX}{new}"
        for value in node.values():
            _rename_refs(value, old, new)
    elif isinstance(node, list):
        for value in node:
            _rename_refs(value, old, new)


def _collect_refs(node) -> list[str]:
    found = []
    if isinstance(node, dict):
        target = ref_target(node)
        if target is not None:
            found.append(target)
        for value in node.values():
            found.extend(_collect_refs(value))
    elif isinstance(node, list):
        for value in node:
            found.extend(_collect_refs(value))
    return found


def restructure(schema: dict, root_name: str, reserved: Iterable[str] = ()) -> dict:
    """Return a copy of `schema` whose nested shapes live in `definitions`.

    The input draft is not modified. Draft definitions that no access path
    reaches are dropped. No definition is named `root_name` or any of
    `reserved`; clashing paths get a numeric suffix.
    """
    source = schema.get("definitions") or {}
    root = copy.deepcopy({k: v for k, v in schema.items() if k != "definitions"})
    walker = _Restructurer(source, reserved={root_name, *reserved})

    if root.get("type") == "array":
        root["items"] = walker.lift_item(root.get("items") or {}, root_name + "Item")
    else:
        walker.walk(root, root_name)

    walker.adopt_leftovers(root)
    root["definitions"] = walker.definitions
    return root


def build_ref_map(definitions: dict[str, dict]) -> dict[str, str]:
    """Definition key -> emitted schema constant name."""
    return {key: schema_name(to_pascal_case(key)) for key in definitions}


def mark_references(node, ref_map: dict[str, str]):
    """Copy of `node` with local refs replaced by `__REF__<schema>` markers."""
    if isinstance(node, list):
        return [mark_references(item, ref_map) for item in node]
    if not isinstance(node, dict):
        return node

    target = ref_target(node)
    if target is not None and target in ref_map:
        marked = {k: v for k, v in node.items() if k != "$ref"}
        marked["const"] = f"{MARKER_PREFIX}{ref_map[target]}"
        return marked

    return {k: mark_references(v, ref_map) for k, v in node.items()}
