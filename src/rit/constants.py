"""Constants used throughout Rit."""

# Version
VERSION = "0.1.0"

# Directory names
RIT_DIR = ".rit"
OBJECTS_DIR = "objects"

# File names (relative to RIT_DIR)
HEAD_FILE = "HEAD"
INDEX_FILE = "index"

# Environment variable overriding the repository root
ROOT_ENV_VAR = "RIT_ROOT"

# Hash algorithm
HASH_ALGORITHM = "sha1"
HASH_LENGTH = 40  # SHA-1 produces 40 hex characters

# Schema versions for persisted records
INDEX_SCHEMA_VERSION = 1
COMMIT_SCHEMA_VERSION = 1

# Text encoding for blobs and records
ENCODING = "utf-8"

# Exit codes
EXIT_USER_ERROR = 1
EXIT_SYSTEM_ERROR = 2
EXIT_DATA_ERROR = 3
