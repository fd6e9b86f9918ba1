from __future__ import annotations

import logging
from typing import List, Optional

from .cancel import CancellationToken, check
from .codec import Codec
from .container import NamedBlob, read_container, write_container
from .envelope import format_envelope, parse_envelope, verify_digest
from .errors import (
    CompressedStreamError,
    EnvelopeFormatError,
    HexDecodeError,
    HexLengthError,
    InputUnavailableError,
    OperationCancelled,
)
from .hexcodec import hex_decode, hex_encode
from .result import Result
from .source import SourceLike, as_source


_log = logging.getLogger(__name__)

_READ_CHUNK = 64 * 1024


def _read_all(stream, token: Optional[CancellationToken]) -> bytes:
    buf = bytearray()
    while True:
        check(token)
        part = stream.read(_READ_CHUNK)
        if not part:
            return bytes(buf)
        buf += part


def create(
    source: SourceLike,
    *,
    token: Optional[CancellationToken] = None,
    logger: Optional[logging.Logger] = None,
    mtime: Optional[int] = None,
    level: Optional[int] = None,
) -> Result[str]:
    """Pack ``source`` into a single-line envelope.

    Args:
        source: Free text (``str``), raw ``bytes``, a ``pathlib.Path`` or an
            ``InputSource``. Text and bytes are stored under the name ``-``.
        token: Optional cancellation token checked between stages.
        logger: Diagnostic sink; defaults to this module's logger.
        mtime: Header modification time; defaults to now.
        level: gzip level; defaults to best compression.

    Returns:
        ``Result(envelope, True)`` on success, ``Result("", False)`` otherwise.
    """
    log = logger or _log
    try:
        check(token)
        src = as_source(source)
        try:
            stream = src.open()
        except InputUnavailableError as exc:
            log.warning("Input unavailable: %s", exc)
            return Result("", False)
        with stream:
            data = _read_all(stream, token)
        container = write_container(src.name, data, mtime=mtime, token=token)
        check(token)
        compressed = Codec(level).compress(container)
        check(token)
        return Result(format_envelope(hex_encode(compressed)), True)
    except OperationCancelled:
        log.debug("create cancelled")
        return Result("", False, cancelled=True)
    except Exception as exc:
        log.error("Failed to create .loaf archive", exc_info=exc)
        return Result("", False)


def verify(
    text: str,
    *,
    token: Optional[CancellationToken] = None,
    logger: Optional[logging.Logger] = None,
) -> Result[bool]:
    """Check the embedded digest of an envelope.

    ``succeeded`` is False only when the text is not an envelope at all. A
    digest of the wrong length or one that does not match the payload is a
    completed check with a negative answer: ``Result(False, True)``.
    """
    log = logger or _log
    try:
        check(token)
        try:
            env = parse_envelope(text.strip())
        except EnvelopeFormatError as exc:
            log.warning("Invalid .loaf format: %s", exc)
            return Result(False, False)
        if not env.has_valid_digest_length:
            log.warning("Invalid .loaf format: hash length is %d, expected 64", len(env.digest))
            return Result(False, True)
        check(token)
        return Result(verify_digest(env.digest, env.payload), True)
    except OperationCancelled:
        log.debug("verify cancelled")
        return Result(False, False, cancelled=True)
    except Exception as exc:
        log.error("Failed to verify .loaf archive", exc_info=exc)
        return Result(False, False)


def extract(
    text: str,
    *,
    token: Optional[CancellationToken] = None,
    logger: Optional[logging.Logger] = None,
) -> Result[List[NamedBlob]]:
    """Unpack the blobs held by an envelope.

    The embedded digest is not checked; call ``verify`` for integrity.
    """
    log = logger or _log
    try:
        check(token)
        try:
            env = parse_envelope(text.strip())
        except EnvelopeFormatError as exc:
            log.warning("Invalid .loaf format: %s", exc)
            return Result([], False)
        try:
            compressed = hex_decode(env.payload)
        except HexLengthError:
            log.warning("Invalid hex data: odd length")
            return Result([], False)
        except HexDecodeError as exc:
            log.warning("Invalid hex data: %s", exc)
            return Result([], False)
        check(token)
        try:
            container = Codec().decompress(compressed)
        except CompressedStreamError as exc:
            log.warning("Invalid compressed payload: %s", exc)
            return Result([], False)
        check(token)
        return Result(read_container(container, token=token), True)
    except OperationCancelled:
        log.debug("extract cancelled")
        return Result([], False, cancelled=True)
    except Exception as exc:
        log.error("Failed to extract .loaf archive", exc_info=exc)
        return Result([], False)
