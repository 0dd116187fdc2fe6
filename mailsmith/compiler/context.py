"""Per-compile processing context.

A ProcessingContext is created at the start of every compile, filled in by
each nested resolution step and handed back to the caller. It is never
shared between compiles.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class DependencyType(str, Enum):
    """Role a file played in producing a compiled template."""

    TEMPLATE = "template"
    STYLE = "style"
    STYLE_INLINE = "style_inline"
    FRAGMENT = "fragment"


@dataclass(frozen=True)
class Dependency:
    """A file read while compiling, tagged with the role it played."""

    path: Path
    type: DependencyType


@dataclass
class ProcessingContext:
    """Everything a compile discovers about one document."""

    dependencies: set[Dependency] = field(default_factory=set)
    meta: dict[str, str] = field(default_factory=dict)
    html: str | None = None
    title: str = ""

    def add_dependency(self, path: Path, dependency_type: DependencyType) -> None:
        self.dependencies.add(Dependency(path, dependency_type))

    def add_meta(self, name: str, content: str) -> None:
        self.meta[name] = content

    def dependencies_of(self, dependency_type: DependencyType) -> set[Path]:
        """Paths of every dependency recorded with the given type."""
        return {d.path for d in self.dependencies if d.type is dependency_type}
