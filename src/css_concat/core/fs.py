import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator


def relpath_posix(path: Path, base_dir: Path) -> str:
    """
    POSIX relative path from base_dir to path. Unlike Path.relative_to this
    walks up with '..' when path is not below base_dir.
    """
    return Path(os.path.relpath(Path(path).absolute(), Path(base_dir).absolute())).as_posix()


def _sync_directory(directory: Path) -> None:
    try:
        fd = os.open(directory, os.O_RDONLY)
    except OSError:
        # directories cannot be opened on Windows
        return
    try:
        os.fsync(fd)
    except OSError:
        pass
    finally:
        os.close(fd)


@contextmanager
def _staged(target: Path, mode: int) -> Iterator[BinaryIO]:
    """
    Yield a temp file next to `target`; on clean exit it is fsync'd and
    renamed over `target`, otherwise it is removed and `target` untouched.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fh:
            yield fh
            fh.flush()
            os.fsync(fh.fileno())
        os.chmod(tmp, mode)
        os.replace(tmp, target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    _sync_directory(target.parent)


def atomic_write_bytes(path: Path, data: bytes, *, mode: int = 0o644) -> None:
    """
    Replace `path` with `data` so readers see either the old or the new
    file, never a truncated one. Parent directories are created.
    """
    with _staged(Path(path), mode) as fh:
        fh.write(data)


def atomic_write_text(path: Path, text: str, *, encoding: str = "utf-8", mode: int = 0o644) -> None:
    # newlines are written as-is
    atomic_write_bytes(path, text.encode(encoding), mode=mode)
