"""Build manifest for incremental template compilation.

The manifest lives next to the compiled outputs and records, for every
output, the source it came from and every file that went into it. An output
only needs rebuilding when one of those files changed since it was written.
"""

import logging
from pathlib import Path
from typing import Self

from pydantic import BaseModel, Field, ValidationError

from mailsmith.compiler.context import DependencyType, ProcessingContext
from mailsmith.core.constants import MANIFEST_FILE_NAME

logger = logging.getLogger(__name__)


class DependencyRecord(BaseModel):
    path: Path
    type: DependencyType


class ManifestEntry(BaseModel):
    """What one compiled output was built from."""

    output: str
    source: Path
    dependencies: list[DependencyRecord] = Field(default_factory=list)
    title: str = ""
    meta: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_context(
        cls, output: str, source: Path, context: ProcessingContext
    ) -> Self:
        dependencies = sorted(
            context.dependencies, key=lambda d: (str(d.path), d.type.value)
        )
        return cls(
            output=output,
            source=source,
            dependencies=[
                DependencyRecord(path=d.path, type=d.type) for d in dependencies
            ],
            title=context.title,
            meta=dict(context.meta),
        )


class BuildManifest(BaseModel):
    entries: dict[str, ManifestEntry] = Field(default_factory=dict)

    @staticmethod
    def path_in(output_dir: Path) -> Path:
        return output_dir / MANIFEST_FILE_NAME

    @classmethod
    def load(cls, output_dir: Path) -> Self:
        """Read the manifest from ``output_dir``; an unusable file starts fresh."""
        path = cls.path_in(output_dir)
        if not path.exists():
            return cls()
        try:
            return cls.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            logger.warning(
                "Ignoring unreadable build manifest %s: %s",
                path,
                exc,
                extra={"path": str(path)},
            )
            return cls()

    def save(self, output_dir: Path) -> Path:
        path = self.path_in(output_dir)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    def record(self, entry: ManifestEntry) -> None:
        self.entries[entry.output] = entry

    def is_stale(self, output: str, source: Path, output_dir: Path) -> bool:
        """Whether ``output`` has to be rebuilt from ``source``.

        An output is stale when it or its manifest entry is missing, or when
        the source or any recorded dependency is missing or newer than it.
        """
        target = output_dir / output
        entry = self.entries.get(output)
        if entry is None or not target.exists():
            return True

        built_at = target.stat().st_mtime
        inputs = [source, *(record.path for record in entry.dependencies)]
        for path in inputs:
            try:
                if path.stat().st_mtime > built_at:
                    return True
            except OSError:
                return True
        return False
