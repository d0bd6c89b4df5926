from __future__ import annotations

from enum import Enum


class EventType(str, Enum):
    CONCAT_START = "concat.start"
    CONCAT_FINISH = "concat.finish"

    STAGE_START = "stage.start"
    STAGE_SUCCESS = "stage.success"
    STAGE_FAILED = "stage.failed"

    FETCH_PLAN = "fetch.plan"
    FETCH_SOURCE_START = "fetch.source.start"
    FETCH_SOURCE_FINISH = "fetch.source.finish"

    CACHE_HIT = "cache.hit"
    CACHE_MISS = "cache.miss"

    TRANSFORM_START = "transform.start"
    TRANSFORM_FINISH = "transform.finish"

    ASSET_LOCALIZED = "asset.localized"
    ARTIFACT_WRITTEN = "artifact.written"
