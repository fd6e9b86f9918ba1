from __future__ import annotations

from typing import Iterable, List

from .constants import TEXT_PREVIEW_LIMIT, TEXT_PRINTABLE_RATIO
from .container import NamedBlob


def is_likely_text(data: bytes) -> bool:
    """Printable ASCII plus tab/LF/CR must exceed the configured ratio."""
    if not data:
        return True
    printable = sum(1 for b in data if 32 <= b <= 126 or b in (9, 10, 13))
    return printable / len(data) > TEXT_PRINTABLE_RATIO


def _content_lines(blob: NamedBlob) -> List[str]:
    if blob.size <= TEXT_PREVIEW_LIMIT and is_likely_text(blob.data):
        try:
            return ["   Content:", blob.data.decode("utf-8")]
        except UnicodeDecodeError:
            pass
    return ["   Content: (binary data)"]


def describe_blobs(blobs: Iterable[NamedBlob]) -> str:
    blobs = list(blobs)
    if not blobs:
        return "Empty archive"
    lines = ["Extraction successful", ""]
    for i, blob in enumerate(blobs):
        lines.append(f"File: {blob.name}")
        lines.append(f"   Size: {blob.size} bytes")
        lines.extend(_content_lines(blob))
        if i < len(blobs) - 1:
            lines += ["", "---", ""]
    return "\n".join(lines)
