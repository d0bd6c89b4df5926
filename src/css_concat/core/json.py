import json
from typing import Any


def compact_json(obj: Any) -> str:
    """Single-line JSON with no spaces; non-ASCII paths stay readable."""
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"))
