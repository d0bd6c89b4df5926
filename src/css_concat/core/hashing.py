import hashlib
from pathlib import Path


def sha256_bytes(b: bytes) -> str:
    return hashlib.sha256(b).hexdigest()


def sha256_file(path: Path) -> tuple[str, int]:
    """Return (hex digest, size in bytes) of a file on disk."""
    with Path(path).open("rb") as f:
        digest = hashlib.file_digest(f, "sha256")
        size = f.tell()
    return digest.hexdigest(), size


def hashed_name(name: str, data: bytes, *, length: int = 8) -> str:
    """
    Append a content hash to a file name, keeping the extension:

      logo.png -> logo_1a2b3c4d.png
    """
    p = Path(name)
    return f"{p.stem}_{sha256_bytes(data)[:length]}{p.suffix}"
