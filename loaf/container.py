from __future__ import annotations

import io
import logging
import struct
import time
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Union

from .cancel import CancellationToken, check
from .constants import (
    BLOCK_SIZE,
    END_MARKER_BLOCKS,
    NAME_FIELD_SIZE,
    SIZE_DIGITS,
    MTIME_DIGITS,
    CHECKSUM_DIGITS,
    CHECKSUM_OFFSET,
    CHECKSUM_FIELD_SIZE,
    FILE_MODE,
    OWNER_ID,
    GROUP_ID,
    TYPE_REGULAR,
)


logger = logging.getLogger(__name__)


# Header record (fixed 512 bytes), ustar-compatible field widths
#  - name[100]      NUL padded, UTF-8
#  - mode[8]        octal text + NUL
#  - uid[8]         octal text + NUL
#  - gid[8]         octal text + NUL
#  - size[12]       11 octal digits + NUL
#  - mtime[12]      11 octal digits + NUL
#  - checksum[8]    6 octal digits + NUL + SP
#  - typeflag[1]
#  - rest[355]      unused, zero
_HEADER_STRUCT = struct.Struct("100s8s8s8s12s12s8s1s355s")
_ZERO_BLOCK = b"\x00" * BLOCK_SIZE
_OCTAL_DIGITS = frozenset("01234567")


@dataclass(frozen=True)
class NamedBlob:
    name: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class TarHeader:
    name: bytes
    size: int
    mtime: int
    mode: bytes = FILE_MODE
    uid: bytes = OWNER_ID
    gid: bytes = GROUP_ID
    typeflag: bytes = TYPE_REGULAR

    def pack(self) -> bytes:
        if self.size >= 8 ** SIZE_DIGITS:
            raise ValueError(f"blob too large for an {SIZE_DIGITS}-digit size field: {self.size}")
        pre_sum = _HEADER_STRUCT.pack(
            self.name[:NAME_FIELD_SIZE],
            self.mode,
            self.uid,
            self.gid,
            _octal(self.size, SIZE_DIGITS),
            _octal(self.mtime, MTIME_DIGITS),
            b"",  # checksum placeholder
            self.typeflag,
            b"",
        )
        chk = _octal(header_checksum(pre_sum), CHECKSUM_DIGITS) + b"\x00 "
        end = CHECKSUM_OFFSET + CHECKSUM_FIELD_SIZE
        return pre_sum[:CHECKSUM_OFFSET] + chk + pre_sum[end:]

    @classmethod
    def unpack(cls, block: bytes) -> "TarHeader":
        name, mode, uid, gid, size, mtime, _chk, typeflag, _rest = _HEADER_STRUCT.unpack(block)
        return cls(
            name=name.split(b"\x00", 1)[0],
            size=_parse_size(size[:SIZE_DIGITS]),
            mtime=_parse_size(mtime[:MTIME_DIGITS]),
            mode=mode.rstrip(b"\x00"),
            uid=uid.rstrip(b"\x00"),
            gid=gid.rstrip(b"\x00"),
            typeflag=typeflag,
        )

    @property
    def display_name(self) -> str:
        return self.name.decode("utf-8", errors="replace")


def _octal(value: int, digits: int) -> bytes:
    return format(value, "o").rjust(digits, "0").encode("ascii")


def _parse_size(field: bytes) -> int:
    """Octal first, plain decimal as a fallback, 0 when neither parses."""
    text = field.decode("ascii", errors="replace").rstrip("\x00 ")
    if text and set(text) <= _OCTAL_DIGITS:
        return int(text, 8)
    stripped = text.strip()
    if stripped.isascii() and stripped.isdigit():
        return int(stripped, 10)
    return 0


def header_checksum(block: bytes) -> int:
    """Unsigned byte sum of a header, counting the checksum field as eight spaces."""
    if len(block) != BLOCK_SIZE:
        raise ValueError("header block must be 512 bytes")
    end = CHECKSUM_OFFSET + CHECKSUM_FIELD_SIZE
    return sum(block[:CHECKSUM_OFFSET]) + 32 * CHECKSUM_FIELD_SIZE + sum(block[end:])


def _padding(size: int) -> int:
    return (BLOCK_SIZE - size % BLOCK_SIZE) % BLOCK_SIZE


def write_container(
    name: str,
    data: bytes,
    *,
    mtime: Optional[int] = None,
    token: Optional[CancellationToken] = None,
) -> bytes:
    """Serialize one named blob followed by the two-block end marker."""
    raw_name = name.encode("utf-8")
    if len(raw_name) > NAME_FIELD_SIZE:
        logger.warning("Entry name is %d bytes; truncating to %d", len(raw_name), NAME_FIELD_SIZE)
    header = TarHeader(
        name=raw_name[:NAME_FIELD_SIZE],
        size=len(data),
        mtime=int(time.time()) if mtime is None else int(mtime),
    )
    check(token)
    out = bytearray(header.pack())
    out += data
    out += b"\x00" * _padding(len(data))
    out += _ZERO_BLOCK * END_MARKER_BLOCKS
    return bytes(out)


def _read_up_to(f: BinaryIO, n: int, token: Optional[CancellationToken]) -> bytes:
    buf = bytearray()
    while len(buf) < n:
        check(token)
        part = f.read(n - len(buf))
        if not part:
            break
        buf += part
    return bytes(buf)


def read_container(
    src: Union[bytes, bytearray, BinaryIO],
    *,
    token: Optional[CancellationToken] = None,
) -> List[NamedBlob]:
    """Parse every blob up to the end marker (or the end of the data).

    Header checksums are not validated here; integrity is the envelope's job.
    """
    f = io.BytesIO(bytes(src)) if isinstance(src, (bytes, bytearray)) else src
    blobs: List[NamedBlob] = []
    while True:
        check(token)
        block = f.read(BLOCK_SIZE)
        if len(block) < BLOCK_SIZE:
            break
        if block == _ZERO_BLOCK:
            break
        header = TarHeader.unpack(block)
        # a short source leaves the tail of the blob zero-filled
        data = _read_up_to(f, header.size, token).ljust(header.size, b"\x00")
        pad = _padding(header.size)
        if pad:
            f.read(pad)
        blobs.append(NamedBlob(header.display_name, data))
    return blobs
