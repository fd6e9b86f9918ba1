from __future__ import annotations

from .constants import DEFAULT_NAME


STDIN_FILENAME = "stdin"


def member_path(name: str) -> str:
    """Map a stored blob name to a relative output path.

    Rules:
    - The stdin placeholder name maps to a fixed file name
    - Convert backslashes to slashes, drop drive prefixes and leading slashes
    - Remove empty and '.' segments
    - Reject '..' segments and names that end up empty
    """
    if name == DEFAULT_NAME:
        return STDIN_FILENAME
    p = name.replace("\\", "/")
    if len(p) >= 2 and p[1] == ":":
        p = p[2:]
    parts = [q for q in p.split("/") if q not in ("", ".")]
    if any(q == ".." for q in parts):
        raise ValueError(f"Entry name may not contain '..': {name!r}")
    if not parts:
        raise ValueError(f"Entry name is empty: {name!r}")
    return "/".join(parts)
