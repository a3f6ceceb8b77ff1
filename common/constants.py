"""Project-wide constants (share path, chunk size, upload hints)."""

SHARE_PATH_PREFIX: str = "/share/"

CHUNK_SIZE_BYTES: int = 5 * 1024 * 1024  # Appwrite splits uploads into 5 MiB chunks

DEFAULT_MIME_TYPE: str = "application/octet-stream"

UPLOAD_LIMIT_HINT: str = "max 50MB, any type"

PREVIEW_WIDTH: int = 600
PREVIEW_HEIGHT: int = 400

SESSION_REF_CURRENT: str = "current"
