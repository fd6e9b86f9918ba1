from __future__ import annotations

import gzip
import zlib
from typing import Optional

from .constants import COMPRESSION_LEVEL
from .errors import CompressedStreamError


class Codec:
    """gzip (RFC 1952) wrapper around deflate; whole buffers only."""

    def __init__(self, level: Optional[int] = None):
        self.level = COMPRESSION_LEVEL if level is None else level

    def compress(self, data: bytes) -> bytes:
        # mtime=0 keeps the gzip header free of wall-clock time
        return gzip.compress(data, compresslevel=self.level, mtime=0)

    def decompress(self, data: bytes) -> bytes:
        try:
            return gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as e:
            raise CompressedStreamError(f"gzip decompression failed: {e}") from e


_DEFAULT = Codec()


def compress(data: bytes) -> bytes:
    return _DEFAULT.compress(data)


def decompress(data: bytes) -> bytes:
    return _DEFAULT.decompress(data)
