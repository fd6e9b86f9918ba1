"""
The single-line LoaF envelope: ``SHA256(-)=<digest> <hex payload>``.

The digest covers the UTF-8 bytes of the hex text itself, not the binary it
encodes. Existing LoaF tooling computes it that way, so it stays.
"""
from __future__ import annotations

import hmac
import re
from dataclasses import dataclass
from typing import Optional

from Cryptodome.Hash import SHA256

from .constants import DIGEST_HEX_LEN, ENVELOPE_PREFIX
from .errors import EnvelopeFormatError


# Hash group is length-agnostic on purpose; the length is judged by verify.
_ENVELOPE_RE = re.compile(r"SHA256\(-\)=([0-9a-f]+) (.*)")
_DETECT_RE = re.compile(r"SHA256\(-\)=[0-9a-f]{%d} [0-9a-f]*" % DIGEST_HEX_LEN, re.IGNORECASE)


@dataclass(frozen=True)
class ParsedEnvelope:
    digest: str
    payload: str

    @property
    def has_valid_digest_length(self) -> bool:
        return len(self.digest) == DIGEST_HEX_LEN


def compute_digest(hex_payload: str) -> str:
    return SHA256.new(hex_payload.encode("utf-8")).hexdigest().lower()


def format_envelope(hex_payload: str) -> str:
    return f"{ENVELOPE_PREFIX}{compute_digest(hex_payload)} {hex_payload}"


def parse_envelope(text: str) -> ParsedEnvelope:
    m = _ENVELOPE_RE.fullmatch(text)
    if m is None:
        raise EnvelopeFormatError("missing or malformed SHA256(-)= header")
    return ParsedEnvelope(digest=m.group(1), payload=m.group(2))


def verify_digest(digest: str, hex_payload: str) -> bool:
    """Recompute the digest of ``hex_payload`` and compare, ignoring case."""
    expected = compute_digest(hex_payload)
    try:
        return hmac.compare_digest(digest.lower(), expected)
    except TypeError:
        # non-ASCII digest text cannot match a hex digest
        return False


def is_envelope(text: Optional[str]) -> bool:
    """Cheap detection check for candidate text, e.g. clipboard or file contents."""
    if not text:
        return False
    return _DETECT_RE.fullmatch(text.strip()) is not None
