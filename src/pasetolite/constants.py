"""Default configuration constants for pasetolite."""

# Protocol defaults
DEFAULT_VERSION = "v1"
DEFAULT_PURPOSE = "public"

# Token wire format
TOKEN_SEPARATOR = "."
# header (2 segments) + body, optionally + footer
TOKEN_SEGMENTS_WITHOUT_FOOTER = 3
TOKEN_SEGMENTS_WITH_FOOTER = 4

# Key export format version
EXPORT_VERSION = 1

# Fixed failure messages; they must not depend on the cause
VERIFICATION_FAILED_MESSAGE = "The token failed verification."
DECRYPTION_FAILED_MESSAGE = "The token failed decryption."
