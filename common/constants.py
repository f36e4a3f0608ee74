"""Project-wide constants (chunk sizes, tag names, batch widths)."""

CHUNK_SIZE_CHARS: int = 50 * 1024  # base64 characters per chunk segment

# Legacy uploads base64-encoded each 50 KiB slice of raw UTF-8 independently,
# so every full legacy chunk is exactly 4 * ceil(51200 / 3) characters long.
LEGACY_CHUNK_LENGTH: int = 68268

DOWNLOAD_BATCH_SIZE: int = 5
DOWNLOAD_BATCH_PAUSE_SECONDS: float = 0.1

# Documents at or above this size go through the chunked path.
DIRECT_UPLOAD_LIMIT_BYTES: int = 90 * 1024

PROGRESS_KEY_PREFIX: str = "upload-progress-"

APP_NAME: str = "GetClayed"
DEFAULT_DATA_TYPE: str = "clay-project"
CHUNK_DATA_TYPE_SUFFIX: str = "-chunk"
MANIFEST_DATA_TYPE_SUFFIX: str = "-manifest"
DOCUMENT_VERSION: str = "2.0"

TAG_APP_NAME = "App-Name"
TAG_DATA_TYPE = "Data-Type"
TAG_CONTENT_TYPE = "Content-Type"
TAG_PROJECT_ID = "Project-ID"
TAG_PROJECT_NAME = "Project-Name"
TAG_AUTHOR = "Author"
TAG_CHUNK_SET_ID = "Chunk-Set-ID"
TAG_CHUNK_INDEX = "Chunk-Index"
TAG_TOTAL_CHUNKS = "Total-Chunks"
TAG_CREATED_AT = "Created-At"
TAG_UPDATED_AT = "Updated-At"
TAG_FOLDER = "Folder"
TAG_ROOT_TX = "Root-TX"
TAG_THUMBNAIL_ID = "Thumbnail-ID"
TAG_VERSION = "Version"
TAG_FILE_EXTENSION = "File-Extension"

OWNERSHIP_TAGS = {
    "original_creator": "Original-Creator",
    "transferred_from": "Transferred-From",
    "transferred_at": "Transferred-At",
    "transfer_count": "Transfer-Count",
}
