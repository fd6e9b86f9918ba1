# Envelope layout
ENVELOPE_ALGORITHM = "SHA256"
ENVELOPE_PREFIX = "SHA256(-)="    # followed by <digest> SP <hex payload>
DIGEST_HEX_LEN = 64

# Name recorded for sources that carry none (free text, raw bytes)
DEFAULT_NAME = "-"

# Container (ustar-style) layout
BLOCK_SIZE = 512
END_MARKER_BLOCKS = 2
NAME_FIELD_SIZE = 100
SIZE_DIGITS = 11
MTIME_DIGITS = 11
CHECKSUM_DIGITS = 6
CHECKSUM_OFFSET = 148
CHECKSUM_FIELD_SIZE = 8

# Fixed placeholder fields written into every header
FILE_MODE = b"0000644"
OWNER_ID = b"0000000"
GROUP_ID = b"0000000"
TYPE_REGULAR = b"0"

# gzip, best compression
COMPRESSION_LEVEL = 9

# Extraction summary heuristics
TEXT_PREVIEW_LIMIT = 10_000
TEXT_PRINTABLE_RATIO = 0.8
