"""Tag sets attached to chunks, manifests and directly stored documents."""

from datetime import datetime, timezone
from typing import List, Optional

from common import constants
from common.types import OwnershipMetadata, Tag
from transfer import config


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def chunk_data_type(data_type: str) -> str:
    return f"{data_type}{constants.CHUNK_DATA_TYPE_SUFFIX}"


def manifest_data_type(data_type: str) -> str:
    return f"{data_type}{constants.MANIFEST_DATA_TYPE_SUFFIX}"


def _optional_tags(
    folder: Optional[str],
    root_tx_id: Optional[str],
    thumbnail_id: Optional[str] = None,
    ownership: Optional[OwnershipMetadata] = None,
    mark_update: bool = False,
) -> List[Tag]:
    tags: List[Tag] = []
    if folder:
        tags.append(Tag(constants.TAG_FOLDER, folder))
    if root_tx_id:
        tags.append(Tag(constants.TAG_ROOT_TX, root_tx_id))
        if mark_update:
            tags.append(Tag(constants.TAG_UPDATED_AT, _now_iso()))
    if thumbnail_id:
        tags.append(Tag(constants.TAG_THUMBNAIL_ID, thumbnail_id))
    if ownership is not None:
        for field_name, tag_name in constants.OWNERSHIP_TAGS.items():
            value = getattr(ownership, field_name)
            if value is None or value == '':
                continue
            value = str(value)
            if field_name in ('original_creator', 'transferred_from'):
                value = value.lower()
            tags.append(Tag(tag_name, value))
    return tags


def build_chunk_tags(
    project_id: str,
    project_name: str,
    author: str,
    chunk_set_id: str,
    chunk_index: int,
    total_chunks: int,
    folder: Optional[str] = None,
    root_tx_id: Optional[str] = None,
    data_type: str = constants.DEFAULT_DATA_TYPE,
) -> List[Tag]:
    """Tags for one chunk blob."""
    tags = [
        Tag(constants.TAG_APP_NAME, config.APP_NAME),
        Tag(constants.TAG_DATA_TYPE, chunk_data_type(data_type)),
        Tag(constants.TAG_PROJECT_ID, project_id),
        Tag(constants.TAG_PROJECT_NAME, project_name),
        Tag(constants.TAG_AUTHOR, author.lower()),
        Tag(constants.TAG_CHUNK_SET_ID, chunk_set_id),
        Tag(constants.TAG_CHUNK_INDEX, str(chunk_index)),
        Tag(constants.TAG_TOTAL_CHUNKS, str(total_chunks)),
        Tag(constants.TAG_CREATED_AT, _now_iso()),
    ]
    return tags + _optional_tags(folder, root_tx_id)


def build_manifest_tags(
    project_id: str,
    project_name: str,
    author: str,
    chunk_set_id: str,
    total_chunks: int,
    folder: Optional[str] = None,
    root_tx_id: Optional[str] = None,
    data_type: str = constants.DEFAULT_DATA_TYPE,
    thumbnail_id: Optional[str] = None,
    ownership: Optional[OwnershipMetadata] = None,
) -> List[Tag]:
    """Tags for a manifest blob; ``Root-TX`` lets resolvers find the newest one."""
    tags = [
        Tag(constants.TAG_CONTENT_TYPE, 'application/json'),
        Tag(constants.TAG_APP_NAME, config.APP_NAME),
        Tag(constants.TAG_DATA_TYPE, manifest_data_type(data_type)),
        Tag(constants.TAG_PROJECT_ID, project_id),
        Tag(constants.TAG_PROJECT_NAME, project_name),
        Tag(constants.TAG_AUTHOR, author.lower()),
        Tag(constants.TAG_CHUNK_SET_ID, chunk_set_id),
        Tag(constants.TAG_TOTAL_CHUNKS, str(total_chunks)),
        Tag(constants.TAG_CREATED_AT, _now_iso()),
    ]
    return tags + _optional_tags(folder, root_tx_id, thumbnail_id, ownership, mark_update=True)


def build_document_tags(
    project_id: str,
    project_name: str,
    author: str,
    folder: Optional[str] = None,
    root_tx_id: Optional[str] = None,
    data_type: str = constants.DEFAULT_DATA_TYPE,
    thumbnail_id: Optional[str] = None,
    ownership: Optional[OwnershipMetadata] = None,
) -> List[Tag]:
    """Tags for a document small enough to be stored as one blob."""
    now = _now_iso()
    tags = [
        Tag(constants.TAG_CONTENT_TYPE, 'application/json'),
        Tag(constants.TAG_APP_NAME, config.APP_NAME),
        Tag(constants.TAG_DATA_TYPE, data_type),
        Tag(constants.TAG_PROJECT_NAME, project_name),
        Tag(constants.TAG_PROJECT_ID, project_id),
        Tag(constants.TAG_AUTHOR, author.lower()),
        Tag(constants.TAG_CREATED_AT, now),
        Tag(constants.TAG_UPDATED_AT, now),
        Tag(constants.TAG_VERSION, constants.DOCUMENT_VERSION),
        Tag(constants.TAG_FILE_EXTENSION, f".{data_type.split('-')[0]}.json"),
    ]
    return tags + _optional_tags(folder, root_tx_id, thumbnail_id, ownership)


def chunk_search_tags(chunk_set_id: str, data_type: str = constants.DEFAULT_DATA_TYPE) -> List[Tag]:
    """Tags identifying every chunk of one chunk set."""
    return [
        Tag(constants.TAG_APP_NAME, config.APP_NAME),
        Tag(constants.TAG_DATA_TYPE, chunk_data_type(data_type)),
        Tag(constants.TAG_CHUNK_SET_ID, chunk_set_id),
    ]
