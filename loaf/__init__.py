"""
LoaF: single-line, self-validating archives.

An envelope is one line of ASCII text:

    SHA256(-)=<64 hex digest> <hex payload>

The payload is the lowercase hex of a gzip stream holding a ustar-style tar
container with one named file. The digest is SHA-256 over the hex text.

- Container writer/reader with fixed 512-byte headers and end marker
- gzip compression, strict hex transcoding, digest envelope
- create/verify/extract returning Result pairs instead of raising
- Cooperative cancellation and a newest-request-wins background runner
- ``loaf`` command-line tool

Note that extract does not check the digest; call verify for integrity.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "container",
    "codec",
    "hexcodec",
    "envelope",
    "pipeline",
    "runner",
    "create",
    "verify",
    "extract",
    "is_envelope",
]

from .envelope import is_envelope
from .pipeline import create, extract, verify
