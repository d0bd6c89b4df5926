from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True, slots=True)
class ArtifactRef:
    """
    A file written by a concat run (output, map sidecar or copied asset).
    """

    path: str
    bytes: int
    sha256: str
    kind: str  # "css" | "map" | "asset"


@dataclass(slots=True)
class ConcatReport:
    run_id: str
    output: str
    map_path: Optional[str]
    duration_ms: int
    sources: list[str] = field(default_factory=list)
    artifacts: list[ArtifactRef] = field(default_factory=list)

    def assets(self) -> list[ArtifactRef]:
        return [a for a in self.artifacts if a.kind == "asset"]
