"""Assembles per-endpoint Zod modules from parsed Bruno files."""

import re
import shutil
from pathlib import Path

import click
from pydantic import BaseModel

from bru2zod.config import GeneratorConfig
from bru2zod.generator.naming import to_pascal_case, url_to_path_name
from bru2zod.generator.synthesis import SchemaSynthesizer
from bru2zod.generator.validator import validate_unit
from bru2zod.parser.base import BruFile

MARKER_RE = re.compile(r"""z\.literal\(['"]__REF__(.+?)['"]\)""")


def rewrite_markers(content: str) -> str:
    """`z.literal("__REF__x")` -> `z.lazy(() => x)`."""
    return MARKER_RE.sub(r"z.lazy(() => \1)", content)


class OutputUnit(BaseModel):
    """Everything written for one endpoint."""

    filename: str
    segments: list[str]
    type_exports: list[str]
    import_line: str = 'import { z } from "zod";'

    def render(self) -> str:
        content = f"{self.import_line}\n\n" + "\n\n".join(self.segments)
        content = rewrite_markers(content)
        unique_exports = list(dict.fromkeys(self.type_exports))
        return f"{content}\n\n" + "\n".join(unique_exports) + "\n"


class GenStats(BaseModel):
    documented_endpoints: int = 0
    created_schemas: int = 0


def prepare_output_dir(out_dir: Path, keep: bool) -> None:
    """Create `out_dir`; unless `keep` is set, remove everything inside it."""
    out_dir.mkdir(parents=True, exist_ok=True)
    if keep:
        return
    for entry in out_dir.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()


class SchemaGenerator:
    """Generates one Zod module per documented endpoint."""

    def __init__(self, config: GeneratorConfig | None = None, synthesizer: SchemaSynthesizer | None = None):
        self.config = config or GeneratorConfig()
        self.synthesizer = synthesizer or SchemaSynthesizer()

    def base_name(self, file: BruFile) -> str:
        """`get` + `/users/:id` -> `GetUsersId` (or `get` + meta name)."""
        method = to_pascal_case(file.method)
        if self.config.naming == "name":
            return method + to_pascal_case(file.name)
        return method + url_to_path_name(file.url)

    def _components(self, file: BruFile) -> list[tuple[str, object]]:
        components = [
            ("Body", file.body),
            ("Header", file.headers),
            ("Query", file.query),
            ("Params", file.params),
        ]
        for response in file.responses:
            components.append((f"{response.status_code}", response.body))
            components.append((f"{response.status_code}Header", response.headers))
        return components

    def build_unit(self, file: BruFile) -> OutputUnit | None:
        """Synthesize every present component of `file`.

        Returns None when the file documents nothing.
        """
        base = self.base_name(file)
        components = [(base + suffix, data) for suffix, data in self._components(file) if data is not None]
        segments: list[str] = []
        type_exports: list[str] = []

        # every component root, plus each name already declared in this file
        taken = {to_pascal_case(name) for name, _ in components}
        for name, data in components:
            result = self.synthesizer.synthesize(name, data, reserved=taken - {to_pascal_case(name)})
            segments.extend(result.zod_segments)
            type_exports.extend(result.type_exports)
            taken.update(result.type_names)

        if not segments:
            return None
        return OutputUnit(
            filename=f"{base}{self.config.extension}",
            segments=segments,
            type_exports=type_exports,
            import_line=self.config.import_line,
        )

    def generate(self, files: list[BruFile], out_dir: Path, verbose: bool = False) -> GenStats:
        """Write one module per file into `out_dir` and return the counts."""
        prepare_output_dir(out_dir, self.config.keep)
        stats = GenStats()

        for file in files:
            unit = self.build_unit(file)
            if unit is None:
                continue

            content = unit.render()
            for problem in validate_unit(content):
                click.echo(f"  Warning: {unit.filename}: {problem}", err=True)

            out_path = out_dir / unit.filename
            out_path.write_text(content, encoding="utf-8")
            if verbose:
                click.echo(f"  Created {out_path}")

            stats.documented_endpoints += 1
            stats.created_schemas += len(unit.segments)

        return stats
