"""Core constants for trackmv.

This module defines constants used throughout the application:
- Locations of the metadata directory and index store
- Environment variables recognised at runtime
- Persisted schema versioning
"""

# ============================================================================
# Working tree layout
# ============================================================================

#: Metadata directory at the root of a tracked working tree
METADATA_DIR: str = ".trackmv"

#: File name of the persisted index inside the metadata directory
INDEX_FILE_NAME: str = "index.json"

#: Suffix appended to the index path to form its lock file
LOCK_SUFFIX: str = ".lock"

# ============================================================================
# Environment
# ============================================================================

#: Overrides the index store location
INDEX_PATH_ENV: str = "TRACKMV_INDEX_PATH"

#: Enables debug tracing and DEBUG-level structured logs
DEBUG_ENV: str = "TRACKMV_DEBUG"

# ============================================================================
# Persistence
# ============================================================================

#: Schema version written into every index document
INDEX_SCHEMA_VERSION: str = "1.0"

#: Chunk size used when fingerprinting file content
FINGERPRINT_CHUNK_SIZE: int = 4096
