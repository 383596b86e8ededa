"""Checks assembled schema modules for unresolved references."""

import re

DECLARATION_RE = re.compile(r"^export const (\w+)\s*=", re.MULTILINE)
LAZY_RE = re.compile(r"z\.lazy\(\(\) => (\w+)\)")
TYPEOF_RE = re.compile(r"z\.infer<typeof (\w+)>")
MARKER_RE = re.compile(r"__REF__\w*")


def find_dangling_references(content: str) -> list[str]:
    """Return referenced schema names that are never declared.

    Covers lazy references and the `typeof` targets of type aliases.
    """
    declared = set(DECLARATION_RE.findall(content))
    referenced = LAZY_RE.findall(content) + TYPEOF_RE.findall(content)
    return sorted({name for name in referenced if name not in declared})


def find_leftover_markers(content: str) -> list[str]:
    """Return placeholder markers that were not rewritten to lazy references."""
    return sorted(set(MARKER_RE.findall(content)))


def find_duplicate_declarations(content: str) -> list[str]:
    seen: set[str] = set()
    duplicates: set[str] = set()
    for name in DECLARATION_RE.findall(content):
        if name in seen:
            duplicates.add(name)
        seen.add(name)
    return sorted(duplicates)


def validate_unit(content: str) -> list[str]:
    """Run all checks on one assembled module.

    Returns a list of human-readable problems, empty when the module is
    consistent.
    """
    errors = []
    for name in find_dangling_references(content):
        errors.append(f"Undeclared schema reference: {name}")
    for marker in find_leftover_markers(content):
        errors.append(f"Unresolved placeholder: {marker}")
    for name in find_duplicate_declarations(content):
        errors.append(f"Duplicate declaration: {name}")
    return errors
