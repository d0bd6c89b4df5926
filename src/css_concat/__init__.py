from .cache import StylesheetCache, clear_cache, default_cache
from .context import ConcatContext
from .core import (
    AssetNotFoundError,
    ConcatError,
    InputError,
    SourceUnavailableError,
    StylesheetSyntaxError,
    TransformError,
    WriteError,
)
from .model import ParsedStylesheet, SourcedNode, Stylesheet
from .pipeline import concat, concat_sync
from .report import ArtifactRef, ConcatReport
from .transforms import AssetLocalizer, Transform
from .writer import SourceMapMode

__all__ = [
    "ArtifactRef",
    "AssetLocalizer",
    "AssetNotFoundError",
    "ConcatContext",
    "ConcatError",
    "ConcatReport",
    "InputError",
    "ParsedStylesheet",
    "SourceMapMode",
    "SourceUnavailableError",
    "SourcedNode",
    "Stylesheet",
    "StylesheetCache",
    "StylesheetSyntaxError",
    "TransformError",
    "Transform",
    "WriteError",
    "clear_cache",
    "concat",
    "concat_sync",
    "default_cache",
]
