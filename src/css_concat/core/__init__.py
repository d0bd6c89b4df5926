from .config import Settings, load_settings
from .errors import (
    AssetNotFoundError,
    ConcatError,
    InputError,
    SourceUnavailableError,
    StylesheetSyntaxError,
    TransformError,
    WriteError,
)
from .fs import atomic_write_bytes, atomic_write_text, relpath_posix
from .hashing import hashed_name, sha256_bytes, sha256_file
from .json import compact_json
from .logging import ILogger, bind, configure_logging, get_logger
from .time import monotonic_ms, new_run_id

__all__ = [
    "AssetNotFoundError",
    "ConcatError",
    "ILogger",
    "InputError",
    "Settings",
    "SourceUnavailableError",
    "StylesheetSyntaxError",
    "TransformError",
    "WriteError",
    "atomic_write_bytes",
    "atomic_write_text",
    "bind",
    "compact_json",
    "configure_logging",
    "get_logger",
    "hashed_name",
    "load_settings",
    "monotonic_ms",
    "new_run_id",
    "relpath_posix",
    "sha256_bytes",
    "sha256_file",
]
