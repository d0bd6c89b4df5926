from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import httpx

from css_concat.cache import StylesheetCache
from css_concat.core import ILogger, Settings, sha256_file

from .events import EventType
from .report import ArtifactRef


@dataclass(slots=True)
class ConcatContext:
    """
    State shared by every stage and transform of a single concat run.
    """

    run_id: str
    output: Path
    logger: ILogger
    cache: StylesheetCache
    client: httpx.AsyncClient
    settings: Settings

    artifacts: list[ArtifactRef] = field(default_factory=list)

    @property
    def output_dir(self) -> Path:
        return self.output.parent

    def stage_logger(self, stage: str) -> ILogger:
        return self.logger.bind(stage=stage)

    def emit(self, event: EventType | str, **kw: object) -> None:
        # events stay at debug; stage and run summaries log at info
        event_value = event.value if isinstance(event, EventType) else str(event)
        self.logger.debug(event_value, event_type=event_value, **kw)

    def record_artifact(self, *, path: Path, kind: str) -> ArtifactRef:
        p = Path(path)
        sha256, size = sha256_file(p)
        art = ArtifactRef(path=str(p), bytes=size, sha256=sha256, kind=kind)
        self.artifacts.append(art)
        self.emit(
            EventType.ARTIFACT_WRITTEN,
            path=art.path,
            bytes=art.bytes,
            sha256=art.sha256,
            kind=kind,
        )
        return art
